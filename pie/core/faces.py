"""Face tag decoding for Picasa Info Extractor.

Picasa stores the faces tagged in a photo as one semicolon-delimited string,
for example:

    rect64(4f5c2b4e8c518ccc),aa95109fb609ca34;rect64(6b8399959ebbeb8),9928f1dc983ded75

Each entry pairs a rect64 region with a contact id. The rect64 value packs
four 16-bit fractions (left, top, right, bottom) of the image size, so the
image's pixel dimensions are needed to turn it into a rectangle.
"""

import logging
import re
import string
from typing import Callable, List, Optional, Tuple

from pie.core.contacts import ContactDirectory
from pie.core.errors import FormatError, MalformedFaceTagError
from pie.core.models import FaceTags, Rectangle

logger = logging.getLogger(__name__)

# Contact id Picasa writes for a face region nobody was assigned to
UNASSIGNED_CONTACT_ID = "ffffffffffffffff"

RECT64_LENGTH = 16
_FIELD_MAX = 0xFFFF
_HEX_DIGITS = frozenset(string.hexdigits)

_FACE_TAG_RE = re.compile(r"rect64\(([0-9a-f]+)\),([0-9a-f]{12,16})", re.IGNORECASE)

# (path) -> (width, height), or None if the image can't be read
DimensionsProvider = Callable[[str], Optional[Tuple[int, int]]]


def _pad_rect64(packed: str) -> str:
    packed = packed.strip()
    if len(packed) > RECT64_LENGTH:
        raise FormatError(f"rect64 value '{packed}' is longer than {RECT64_LENGTH} characters")
    if not all(c in _HEX_DIGITS for c in packed):
        raise FormatError(f"rect64 value '{packed}' is not hexadecimal")
    return packed.rjust(RECT64_LENGTH, "0")


def decode_rectangle(packed: str, image_width: int, image_height: int) -> Rectangle:
    """Decode a rect64 value into a pixel rectangle.

    Values shorter than 16 characters are left-padded with zeros, so
    ``bc5c31f2b04bb94`` decodes as ``0bc5c31f2b04bb94``.

    Args:
        packed: Hex string of up to 16 characters.
        image_width: Image width in pixels.
        image_height: Image height in pixels.

    Returns:
        Rectangle with width = right - left and height = bottom - top,
        not clamped. Zero image dimensions give an all-zero rectangle.

    Raises:
        FormatError: If packed is not hex or is longer than 16 characters.

    Example:
        >>> decode_rectangle("aa95109fb609ca34", 4000, 3000)
        Rectangle(x_coord=2665, y_coord=194, width=179, height=2175)
    """
    padded = _pad_rect64(packed)
    left, top, right, bottom = (int(padded[i:i + 4], 16) for i in range(0, RECT64_LENGTH, 4))

    left_px = left * image_width // _FIELD_MAX
    top_px = top * image_height // _FIELD_MAX
    right_px = right * image_width // _FIELD_MAX
    bottom_px = bottom * image_height // _FIELD_MAX

    return Rectangle(
        x_coord=left_px,
        y_coord=top_px,
        width=right_px - left_px,
        height=bottom_px - top_px,
    )


def parse_face_tags(encoded: str) -> List[Tuple[str, str]]:
    """Split a faces= value into (rect64, contact_id) pairs.

    Trailing empty entries are dropped, so an empty value yields no pairs.
    Every rect64 is validated here so callers can reject a bad record before
    acting on any of its entries.

    Raises:
        MalformedFaceTagError: If any entry is not rect64(<hex>),<hex id>.
    """
    entries = encoded.split(";")
    while entries and not entries[-1].strip():
        entries.pop()

    pairs = []
    for entry in entries:
        match = _FACE_TAG_RE.fullmatch(entry.strip())
        if not match:
            raise MalformedFaceTagError(f"Invalid encoded face tag '{entry}'.")
        rect64, contact_id = match.groups()
        try:
            _pad_rect64(rect64)
        except FormatError as e:
            raise MalformedFaceTagError(f"Invalid encoded face tag '{entry}': {e}") from e
        pairs.append((rect64, contact_id))
    return pairs


class FaceTagResolver:
    """Turns faces= values into contact name -> rectangle mappings.

    Usage:
        resolver = FaceTagResolver(exiftool.get_image_dimensions)
        face_tags = resolver.resolve(value, image_path, album.contacts, contacts)

    Reference counts in both the album and global directories are bumped for
    every face that resolves to a known contact.
    """

    def __init__(self, get_image_dimensions: DimensionsProvider):
        """Initialize resolver.

        Args:
            get_image_dimensions: Callable returning (width, height) for an
                image path, or None if the image can't be read.
        """
        self._get_image_dimensions = get_image_dimensions

    def resolve(
        self,
        encoded: str,
        image_path: str,
        album_contacts: ContactDirectory,
        global_contacts: ContactDirectory
    ) -> FaceTags:
        """Decode every face tagged in one photo.

        Args:
            encoded: The faces= value from picasa.ini.
            image_path: Path of the photo the faces belong to.
            album_contacts: Per-album directory, counts updated in place.
            global_contacts: Run-wide directory used for id lookups, counts
                updated in place.

        Returns:
            Dict of contact name -> Rectangle (possibly empty).

        Raises:
            MalformedFaceTagError: If any entry is malformed. Raised before
                either directory is touched.
        """
        pairs = [
            (rect64, contact_id)
            for rect64, contact_id in parse_face_tags(encoded)
            if contact_id.lower() != UNASSIGNED_CONTACT_ID
        ]

        face_tags: FaceTags = {}
        if not pairs:
            return face_tags

        dimensions = self._get_image_dimensions(image_path)
        if dimensions is None:
            logger.error("%s does not exist or cannot be read; cannot extract face tags.", image_path)
            dimensions = (0, 0)
        width, height = dimensions

        for rect64, contact_id in pairs:
            name = global_contacts.lookup_name_by_id(contact_id)
            if name is None:
                logger.error(
                    "Cannot find '%s' in the global contact list for image '%s'.",
                    contact_id, image_path
                )
                continue

            face_tags[name] = decode_rectangle(rect64, width, height)
            global_contacts.increment(name, contact_id)
            album_contacts.increment(name, contact_id)

        return face_tags
