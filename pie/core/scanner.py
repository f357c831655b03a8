"""Album discovery for Picasa Info Extractor."""

import logging
import os
import re
from typing import Dict, Iterator, Optional

from pie.core.album import AlbumParser
from pie.core.contacts import ContactDirectory
from pie.core.errors import DuplicateKeyError
from pie.core.models import Album, ProgressCallback

logger = logging.getLogger(__name__)

# Picasa keeps pre-edit copies here, along with a copy of picasa.ini
ORIGINALS_DIR_NAME = ".picasaoriginals"

_DESCRIPTOR_RE = re.compile(r"^\.?picasa\.ini$", re.IGNORECASE)


def is_album_descriptor(filename: str) -> bool:
    """Check if a filename is picasa.ini or .picasa.ini, in any case."""
    return _DESCRIPTOR_RE.match(filename) is not None


def _walk_descriptors(
    path: str,
    on_directory: Optional[ProgressCallback] = None
) -> Iterator[str]:
    """Depth-first walk yielding album descriptor paths.

    Entries are visited in sorted name order with files and directories
    interleaved, so a subdirectory that sorts before picasa.ini is finished
    before that picasa.ini is yielded. Symlinks are followed.

    Args:
        path: Directory to walk.
        on_directory: Optional callback, called once per visited directory.

    Yields:
        Paths of picasa.ini files, in traversal order.

    Raises:
        OSError: If a directory cannot be listed, or an entry is neither a
            regular file nor a directory.
    """
    try:
        with os.scandir(path) as it:
            entries = sorted(it, key=lambda entry: entry.name)
    except OSError as e:
        logger.error("Cannot open directory '%s': %s", path, e)
        raise

    logger.info("Processing '%s'.", path)
    if on_directory:
        on_directory(0, 0, f"Scanning: {os.path.basename(path) or path}")

    for entry in entries:
        if entry.is_file():
            if is_album_descriptor(entry.name):
                yield entry.path
        elif entry.is_dir():
            if entry.name.lower() == ORIGINALS_DIR_NAME:
                continue
            yield from _walk_descriptors(entry.path, on_directory)
        else:
            raise OSError(f"Cannot process '{entry.path}' as a file or a directory.")


class AlbumScanner:
    """Walks a directory tree and parses every Picasa album in it.

    Usage:
        scanner = AlbumScanner(parser)
        albums = scanner.walk("/photos", contacts)

        for key, album in albums.items():
            print(key, album.name)

    Keys run 1..N in traversal order. Each scanner owns its key counter, so
    a fresh scanner always starts at 1.
    """

    def __init__(self, parser: AlbumParser):
        """Initialize scanner.

        Args:
            parser: Parser used for each picasa.ini found.
        """
        self.parser = parser
        self.albums: Dict[int, Album] = {}
        self._next_key = 1

    def walk(
        self,
        root_dir: str,
        global_contacts: ContactDirectory,
        on_progress: Optional[ProgressCallback] = None
    ) -> Dict[int, Album]:
        """Find and parse all albums under root_dir.

        Args:
            root_dir: Root albums directory.
            global_contacts: Run-wide contact directory, updated in place.
            on_progress: Optional callback for progress updates.
                Called with (albums_found, albums_found, message).

        Returns:
            Dict of album key -> Album, in traversal order.

        Raises:
            OSError: On unreadable directories or descriptors.
            MalformedFaceTagError: On a malformed faces= value anywhere.
            DuplicateKeyError: If an album key is assigned twice.
        """
        self.albums = {}
        self._next_key = 1

        def directory_progress(current: int, total: int, message: str) -> None:
            found = len(self.albums)
            on_progress(found, found, message)

        for descriptor_path in _walk_descriptors(
            root_dir, directory_progress if on_progress else None
        ):
            album = self.parser.parse(descriptor_path, global_contacts)
            key = self._add_album(album)

            if on_progress:
                on_progress(key, key, f"Album {key}: {album.name or descriptor_path}")

        return self.albums

    def _add_album(self, album: Album) -> int:
        key = self._next_key
        if key in self.albums:
            raise DuplicateKeyError(f"An album with key '{key}' already exists.")
        self.albums[key] = album
        self._next_key += 1
        return key

    @property
    def album_count(self) -> int:
        """Number of albums found by the last walk."""
        return len(self.albums)


def find_descriptors(root_dir: str) -> Iterator[str]:
    """Yield album descriptor paths without parsing them.

    Uses the same traversal rules as AlbumScanner.walk().
    """
    return _walk_descriptors(root_dir)
