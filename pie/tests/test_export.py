"""Tests for pie.core.export module."""

import os
import sqlite3

import orjson
import pytest

from pie.core.album import AlbumParser
from pie.core.export import DatabaseWriter, write_database, write_json
from pie.core.faces import FaceTagResolver
from pie.core.models import Album, ExportModel
from pie.core.scanner import AlbumScanner

from conftest import ALICE_ID, ALICE_OLD_ID, BOB_ID, CAROL_ID


@pytest.fixture
def model(sample_albums, contacts, dimensions) -> ExportModel:
    """Export model built from the sample albums tree."""
    scanner = AlbumScanner(AlbumParser(FaceTagResolver(dimensions)))
    albums = scanner.walk(sample_albums, contacts)
    return ExportModel(albums=albums, contacts=contacts)


def query(db_path, sql):
    conn = sqlite3.connect(db_path)
    try:
        return conn.execute(sql).fetchall()
    finally:
        conn.close()


class TestWriteJson:
    """Tests for write_json() function."""

    def test_top_level_shape(self, model, temp_dir):
        path = os.path.join(temp_dir, "out.json")
        write_json(model, path)

        with open(path, "rb") as f:
            data = orjson.loads(f.read())

        assert set(data) == {"albums", "contacts"}
        assert list(data["albums"]) == ["1", "2"]

    def test_album_record(self, model, temp_dir, sample_albums):
        path = os.path.join(temp_dir, "out.json")
        write_json(model, path)

        with open(path, "rb") as f:
            album = orjson.loads(f.read())["albums"]["1"]

        assert album["name"] == "2019_01_05 - Dining with Alice"
        assert album["date"] == "2019-01-05"
        assert album["category"] == "Enjoying"
        assert album["location"] == "Port Moody, BC, Canada"
        assert album["description"] == "Line one\\nLine two"
        assert album["directory"] == os.path.join(sample_albums, "2019_01_05 - Dining with Alice")
        assert album["contacts"]["Bob Sample"] == {BOB_ID: {"count": 1}}
        assert album["files"]["Dinner_0001.jpg"] == {
            "facetags": {
                "Alice Example": {"xCoord": 43669, "yCoord": 4255, "width": 2932, "height": 47509},
                "Bob Sample": {"xCoord": 1720, "yCoord": 14745, "width": 21299, "height": 34079},
            },
            "tags": {"starred": True},
        }

    def test_unset_fields_are_null(self, temp_dir):
        path = os.path.join(temp_dir, "out.json")
        model = ExportModel(albums={1: Album(directory="/pics/a")})
        model.albums[1].get_file("Photo_0001.jpg")

        write_json(model, path)
        with open(path, "rb") as f:
            album = orjson.loads(f.read())["albums"]["1"]

        assert album["name"] is None
        assert album["date"] is None
        assert album["files"]["Photo_0001.jpg"] == {"facetags": {}, "tags": {}}

    def test_global_contacts(self, model, temp_dir):
        path = os.path.join(temp_dir, "out.json")
        write_json(model, path)

        with open(path, "rb") as f:
            contacts = orjson.loads(f.read())["contacts"]

        assert contacts == {
            "Alice Example": {ALICE_ID: {"count": 1}, ALICE_OLD_ID: {"count": 1}},
            "Bob Sample": {BOB_ID: {"count": 2}},
            "Carol & Co": {CAROL_ID: {"count": 0}},
        }

    def test_output_is_indented_utf8(self, temp_dir):
        path = os.path.join(temp_dir, "out.json")
        model = ExportModel(albums={1: Album(directory="/pics/Café", name="Café")})

        write_json(model, path)
        with open(path, "r", encoding="utf-8") as f:
            text = f.read()

        assert "\n  " in text
        assert "Café" in text


class TestWriteDatabase:
    """Tests for write_database() and DatabaseWriter."""

    def test_contacts_table(self, model, temp_dir):
        path = os.path.join(temp_dir, "out.db")
        write_database(model, path)

        rows = query(path, "SELECT name, picasaId, referenceCount FROM Contacts ORDER BY name, picasaId")

        assert rows == [
            ("Alice Example", ALICE_ID, 1),
            ("Alice Example", ALICE_OLD_ID, 1),
            ("Bob Sample", BOB_ID, 2),
            ("Carol & Co", CAROL_ID, 0),
        ]

    def test_albums_table(self, model, temp_dir, sample_albums):
        path = os.path.join(temp_dir, "out.db")
        write_database(model, path)

        rows = query(path, "SELECT id, name, date, location, description, category, path "
                           "FROM Albums ORDER BY id")

        assert rows == [
            (1, "2019_01_05 - Dining with Alice", "2019-01-05", "Port Moody, BC, Canada",
             "Line one\nLine two", "Enjoying",
             os.path.join(sample_albums, "2019_01_05 - Dining with Alice")),
            (2, "2018_07_14 - Hiking Mt Seymour", "2018-07-14", None, None, "Hiking",
             os.path.join(sample_albums, "Trips", "2018_07_14 - Hiking Mt Seymour")),
        ]

    def test_face_tags_table(self, model, temp_dir):
        path = os.path.join(temp_dir, "out.db")
        write_database(model, path)

        rows = query(path, "SELECT albumName, imageFile, person, xCoord, yCoord, width, height "
                           "FROM FaceTags ORDER BY albumName, imageFile, person")

        assert rows == [
            ("2018_07_14 - Hiking Mt Seymour", "Seymour_0001.jpg", "Bob Sample",
             4096, 8192, 8192, 8192),
            ("2019_01_05 - Dining with Alice", "Dinner_0001.jpg", "Alice Example",
             43669, 4255, 2932, 47509),
            ("2019_01_05 - Dining with Alice", "Dinner_0001.jpg", "Bob Sample",
             1720, 14745, 21299, 34079),
            ("2019_01_05 - Dining with Alice", "Dinner_0002.jpg", "Alice Example",
             0, 0, 0, 0),
        ]

    def test_tags_only_for_tagged_files(self, model, temp_dir):
        path = os.path.join(temp_dir, "out.db")
        write_database(model, path)

        rows = query(path, "SELECT albumName, imageFile, starred, hidden FROM Tags ORDER BY imageFile")

        assert rows == [
            ("2019_01_05 - Dining with Alice", "Dinner_0001.jpg", 1, 0),
            ("2019_01_05 - Dining with Alice", "Dinner_0002.jpg", 1, 1),
        ]

    def test_contact_counts_view(self, model, temp_dir):
        path = os.path.join(temp_dir, "out.db")
        write_database(model, path)

        rows = query(path, "SELECT name, numPicasaIds, numPhotoReferences "
                           "FROM ContactCounts ORDER BY name")

        assert rows == [
            ("Alice Example", 2, 2),
            ("Bob Sample", 1, 2),
            ("Carol & Co", 1, 0),
        ]

    def test_duplicate_album_name_removes_file(self, temp_dir):
        path = os.path.join(temp_dir, "out.db")
        model = ExportModel(albums={
            1: Album(directory="/pics/a", name="Same"),
            2: Album(directory="/pics/b", name="Same"),
        })

        with pytest.raises(sqlite3.IntegrityError):
            write_database(model, path)

        assert not os.path.exists(path)

    def test_failed_write_rolls_back_schema(self, temp_dir):
        path = os.path.join(temp_dir, "out.db")
        model = ExportModel(albums={
            1: Album(directory="/pics/a", name="Same"),
            2: Album(directory="/pics/b", name="Same"),
        })
        writer = DatabaseWriter(path)

        with pytest.raises(sqlite3.IntegrityError):
            with writer as db:
                db.write(model)

        assert query(path, "SELECT name FROM sqlite_master") == []

    def test_existing_schema_raises(self, model, temp_dir):
        path = os.path.join(temp_dir, "out.db")
        write_database(model, path)

        with pytest.raises(sqlite3.OperationalError):
            write_database(model, path)

        # A database this call did not create is left alone
        assert query(path, "SELECT count(*) FROM Albums") == [(2,)]

    def test_writer_closes_connection(self, model, temp_dir):
        writer = DatabaseWriter(os.path.join(temp_dir, "out.db"))

        with writer as db:
            db.write(model)
            assert db.conn is not None

        assert writer.conn is None
