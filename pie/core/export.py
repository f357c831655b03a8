"""JSON and SQLite output for Picasa Info Extractor."""

import logging
import os
import sqlite3
from typing import Optional

import orjson

from pie.core.models import Album, ExportModel

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE Contacts (
    name            TEXT    NOT NULL,
    picasaId        TEXT    NOT NULL,
    referenceCount  INT     NOT NULL,
    PRIMARY KEY (name, picasaId)
);

CREATE TABLE Albums (
    id              INTEGER PRIMARY KEY,
    name            TEXT    NOT NULL,
    date            DATE,
    location        TEXT,
    description     TEXT,
    category        TEXT,
    path            TEXT    NOT NULL,
    UNIQUE(name),
    UNIQUE(path)
);

CREATE TABLE FaceTags (
    albumName       TEXT    NOT NULL,
    imageFile       TEXT    NOT NULL,
    person          TEXT    NOT NULL,
    xCoord          INT     NOT NULL,
    yCoord          INT     NOT NULL,
    width           INT     NOT NULL,
    height          INT     NOT NULL,
    PRIMARY KEY (albumName, imageFile, person, xCoord, yCoord, width, height)
);

CREATE TABLE Tags (
    albumName       TEXT    NOT NULL,
    imageFile       TEXT    NOT NULL,
    starred         BOOLEAN NOT NULL,
    hidden          BOOLEAN NOT NULL,
    PRIMARY KEY (albumName, imageFile)
);

CREATE VIEW ContactCounts AS
    SELECT name,
           count(*) AS numPicasaIds,
           sum(referenceCount) AS numPhotoReferences
    FROM Contacts
    GROUP BY name;
"""


def write_json(model: ExportModel, path: str) -> None:
    """Write the model as pretty-printed JSON.

    Args:
        model: Extraction result.
        path: Output file, replaced if it exists.
    """
    data = orjson.dumps(model.to_dict(), option=orjson.OPT_INDENT_2)
    with open(path, "wb") as f:
        f.write(data)
    logger.info("Wrote %d albums to '%s'", len(model.albums), path)


def _expand_description(description: Optional[str]) -> Optional[str]:
    # Picasa escapes newlines in descriptions as a literal backslash-n
    if not description:
        return description
    return description.replace("\\n", "\n")


class DatabaseWriter:
    """Writes an ExportModel into a new SQLite database.

    Usage:
        with DatabaseWriter("/path/to/extract.db") as db:
            db.write(model)

    The schema and every row are written in one transaction: committed
    when the context exits cleanly, rolled back otherwise, so a failed
    write leaves no tables behind.
    """

    def __init__(self, db_path: str):
        self.db_path = db_path
        self.conn: Optional[sqlite3.Connection] = None

    def open(self) -> sqlite3.Connection:
        if self.conn is None:
            # Autocommit mode, so BEGIN also covers the CREATE statements
            conn = sqlite3.connect(self.db_path, isolation_level=None)
            try:
                conn.execute("BEGIN")
                for statement in SCHEMA.split(";"):
                    if statement.strip():
                        conn.execute(statement)
            except sqlite3.Error:
                conn.rollback()
                conn.close()
                raise
            self.conn = conn
        return self.conn

    def close(self) -> None:
        if self.conn is not None:
            self.conn.close()
            self.conn = None

    def write(self, model: ExportModel) -> None:
        """Insert contacts, then albums with their face tags and tags."""
        conn = self.open()

        conn.executemany(
            "INSERT INTO Contacts (name, picasaId, referenceCount) VALUES (?, ?, ?)",
            model.contacts.rows()
        )

        for key in sorted(model.albums):
            self._write_album(conn, key, model.albums[key])

        logger.info(
            "Inserted %d contacts and %d albums into '%s'",
            len(model.contacts), len(model.albums), self.db_path
        )

    def _write_album(self, conn: sqlite3.Connection, key: int, album: Album) -> None:
        conn.execute(
            "INSERT INTO Albums (id, name, date, location, description, category, path) "
            "VALUES (?, ?, ?, ?, ?, ?, ?)",
            (
                key,
                album.name,
                album.date,
                album.location,
                _expand_description(album.description),
                album.category,
                album.directory,
            )
        )

        for filename in sorted(album.files):
            entry = album.files[filename]

            conn.executemany(
                "INSERT INTO FaceTags "
                "(albumName, imageFile, person, xCoord, yCoord, width, height) "
                "VALUES (?, ?, ?, ?, ?, ?, ?)",
                [
                    (album.name, filename, person,
                     rect.x_coord, rect.y_coord, rect.width, rect.height)
                    for person, rect in sorted(entry.face_tags.items())
                ]
            )

            if entry.tags:
                conn.execute(
                    "INSERT INTO Tags (albumName, imageFile, starred, hidden) VALUES (?, ?, ?, ?)",
                    (album.name, filename, int(entry.starred), int(entry.hidden))
                )

    def __enter__(self) -> "DatabaseWriter":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self.conn is not None:
            if exc_type is None:
                self.conn.commit()
            else:
                self.conn.rollback()
        self.close()


def write_database(model: ExportModel, path: str) -> None:
    """Write the model to a new SQLite file.

    If the write fails, a database file created by this call is removed.
    """
    existed = os.path.exists(path)
    try:
        with DatabaseWriter(path) as db:
            db.write(model)
    except (sqlite3.Error, OSError):
        if not existed and os.path.exists(path):
            os.remove(path)
            logger.info("Removed incomplete database '%s'", path)
        raise
