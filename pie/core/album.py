"""picasa.ini parsing for Picasa Info Extractor.

A picasa.ini file is a loose INI file: an album-level [Picasa] section
followed by one section per photo. Picasa rewrites these files as it evolves,
so anything this module does not understand is logged and skipped rather
than treated as an error.
"""

import logging
import os
import re
from datetime import date, timedelta
from typing import Optional

from pie.core.contacts import ContactDirectory
from pie.core.faces import FaceTagResolver
from pie.core.models import Album

logger = logging.getLogger(__name__)

# Picasa album dates are a number of days since this date
DATE_ZERO = date(1899, 12, 30)

UNKNOWN_CATEGORY = "Unknown"

# First word of the album title -> category
CATEGORY_MAP = {
    "Biking": "Biking",
    "Hiking": "Hiking",
    "Snowshoeing": "Hiking",
    "Walking": "Hiking",
    "Camping": "Camping",
    "Caving": "Camping",
    "Winter": "Camping",
    "Climbing": "Climbing",
    "Learning": "Climbing",
    "Kayaking": "Kayaking",
    "Snowboarding": "Snowboarding",
    "Celebrating": "Celebrating",
    "Flying": "Celebrating",
    "Graduating": "Celebrating",
    "Jumping": "Celebrating",
    "Exploring": "Exploring",
    "Visiting": "Exploring",
    "Burying": "Living",
    "Fighting": "Living",
    "Recovering": "Living",
    "Styling": "Living",
    "Enjoying": "Enjoying",
    "BBQing": "Enjoying",
    "Bungee": "Enjoying",
    "Dining": "Enjoying",
    "Eating": "Enjoying",
    "Golfing": "Enjoying",
    "Paddle": "Enjoying",
    "Paragliding": "Enjoying",
    "Playing": "Enjoying",
    "Runing": "Enjoying",
    "Go": "Working",
    "Leaving": "Working",
    "Working": "Working",
}

ALBUM_SECTION = "Picasa"

# Sections Picasa writes that hold nothing we extract. Contacts2 in
# particular is stale: it keeps renamed and duplicate contacts.
IGNORED_SECTIONS = frozenset({"Contacts2", "encoding", "photoid"})

_SECTION_RE = re.compile(r"^\[(.*)\]$")
_ALBUM_NAME_RE = re.compile(r"^\d{4}_\d{2}_\d{2} - (\w+)")
_FILE_SECTION_RE = re.compile(r"[A-Z].*_\d{4}\.[a-z0-9]{3,4}")
_ALBUM_ID_SECTION_RE = re.compile(r"\.album:[A-F0-9]+", re.IGNORECASE)
_LEGACY_FILE_SECTION_RE = re.compile(r"[A-Za-z][^/\\]*\.[A-Za-z]{3,4}")
_KEY_VALUE_RE = re.compile(r"^([^=]+)=(.*)$")

# Per-file keys that are known and deliberately dropped
_IGNORED_FILE_KEYS = (
    re.compile(r"^BKTag .+$"),
    re.compile(r"^backuphash=\d+$"),
    re.compile(r"^crop=.+$"),
    re.compile(r"^filters=.+$"),
    re.compile(r"^IIDLIST_\S+=[a-z0-9]+$"),
    re.compile(r"^moddate=.+$"),
    re.compile(r"^onlinechecksum=.+$"),
    re.compile(r"^originhash=.+$"),
    re.compile(r"^redo=.+$"),
    re.compile(r"^rotate=.+$"),
    re.compile(r"^textactive=.+$"),
)


def get_album_category(album_name: str) -> str:
    """Categorize an album from the first word of its title.

    Album names are expected to look like 'YYYY_MM_DD - Album Title'.

    Args:
        album_name: The album name from picasa.ini.

    Returns:
        One of the CATEGORY_MAP values, or UNKNOWN_CATEGORY.

    Example:
        >>> get_album_category("2019_01_05 - Dining with Maxwell")
        'Enjoying'
    """
    match = _ALBUM_NAME_RE.match(album_name)
    if not match:
        logger.warning(
            "Unable to determine a category for album '%s'. "
            "Album does not match formatting rules.", album_name
        )
        return UNKNOWN_CATEGORY

    first_word = match.group(1)
    category = CATEGORY_MAP.get(first_word)
    if category is None:
        logger.warning(
            "Unable to determine a category for album '%s' where the first word is '%s'.",
            album_name, first_word
        )
        return UNKNOWN_CATEGORY
    return category


def convert_album_date(offset: str) -> str:
    """Convert a Picasa day offset to a YYYY-MM-DD string.

    Fractional offsets (Picasa sometimes stores a time of day) are truncated.

    Raises:
        ValueError: If offset is not a number.
    """
    days = int(float(offset))
    return (DATE_ZERO + timedelta(days=days)).strftime("%Y-%m-%d")


def is_file_section(section: str) -> bool:
    """Check if a section name follows the album photo naming convention."""
    return _FILE_SECTION_RE.fullmatch(section) is not None


class AlbumParser:
    """Parses picasa.ini files into Album records.

    Usage:
        parser = AlbumParser(FaceTagResolver(exiftool.get_image_dimensions))
        album = parser.parse("/photos/2019_01_05 - Dining/.picasa.ini", contacts)
    """

    def __init__(self, resolver: FaceTagResolver):
        self.resolver = resolver

    def parse(self, descriptor_path: str, global_contacts: ContactDirectory) -> Album:
        """Parse one picasa.ini file.

        Args:
            descriptor_path: Path to the picasa.ini file.
            global_contacts: Run-wide contact directory. Face tags are
                resolved against it and its counts are updated.

        Returns:
            The populated Album.

        Raises:
            OSError: If the file cannot be opened.
            MalformedFaceTagError: If a faces= value is malformed.
        """
        album = Album(directory=os.path.dirname(descriptor_path))
        section: Optional[str] = None
        kind: Optional[str] = None

        logger.debug("Parsing '%s'", descriptor_path)

        with open(descriptor_path, "r", encoding="utf-8-sig", errors="replace", newline="") as f:
            for raw_line in f:
                line = raw_line.rstrip("\r\n")

                header = _SECTION_RE.match(line)
                if header:
                    section = header.group(1)
                    kind = self._classify_section(section, album.directory, descriptor_path)
                    continue

                if not line.strip():
                    continue

                if section is None:
                    logger.warning(
                        "Line '%s' appears before any section in '%s'.", line, descriptor_path
                    )
                elif kind == "album":
                    self._parse_album_line(album, line)
                elif kind == "file":
                    self._parse_file_line(album, section, line, global_contacts)

        return album

    def _classify_section(self, section: str, album_dir: str, descriptor_path: str) -> str:
        """Decide how lines under a section header are handled.

        Returns one of "album", "file" or "skip". Warnings and errors about
        the section are logged once here, not per line.
        """
        if section == ALBUM_SECTION:
            return "album"

        if is_file_section(section):
            return "file"

        if section in IGNORED_SECTIONS or _ALBUM_ID_SECTION_RE.search(section):
            return "skip"

        if _LEGACY_FILE_SECTION_RE.fullmatch(section):
            legacy_path = os.path.join(album_dir, section)
            if os.path.exists(legacy_path):
                logger.error(
                    "Picasa references a file ('%s') that does not follow naming "
                    "conventions. It will be ignored.", legacy_path
                )
            # A missing file is a stale entry left behind after a rename
            return "skip"

        logger.warning("Unknown section '%s' in '%s'.", section, descriptor_path)
        return "skip"

    def _parse_album_line(self, album: Album, line: str) -> None:
        match = _KEY_VALUE_RE.match(line)
        if not match:
            logger.debug("Ignoring line '%s' in section '%s'", line, ALBUM_SECTION)
            return

        key, value = match.groups()
        if key == "name":
            album.name = value
            album.category = get_album_category(value)
        elif key == "date":
            try:
                album.date = convert_album_date(value)
            except (ValueError, OverflowError):
                logger.warning(
                    "Invalid date '%s' for album in '%s'; leaving it unset.", value, album.directory
                )
        elif key == "location":
            album.location = value
        elif key == "description":
            album.description = value
        else:
            logger.debug("Ignoring key '%s' in section '%s'", key, ALBUM_SECTION)

    def _parse_file_line(
        self,
        album: Album,
        filename: str,
        line: str,
        global_contacts: ContactDirectory
    ) -> None:
        if line.startswith("faces="):
            image_path = os.path.join(album.directory, filename)
            album.get_file(filename).face_tags = self.resolver.resolve(
                line[len("faces="):], image_path, album.contacts, global_contacts
            )
        elif line == "hidden=yes":
            album.get_file(filename).tags["hidden"] = True
        elif line == "star=yes":
            album.get_file(filename).tags["starred"] = True
        elif any(pattern.match(line) for pattern in _IGNORED_FILE_KEYS):
            return
        else:
            logger.warning(
                "Unrecognized line '%s' in section '%s' of the picasa.ini file in '%s'.",
                line, filename, album.directory
            )
