"""Picasa contact directory.

Picasa identifies people with opaque 64-bit hex ids. One person may end up
with several ids (re-imported contacts, merged accounts), so the directory is
keyed on the display name and each name owns a set of ids, each with a count
of the photos it was tagged in.
"""

import logging
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from pie.core.errors import ContactsFileError

logger = logging.getLogger(__name__)

_CONTACT_ID_RE = re.compile(r"[a-f0-9]+")


@dataclass
class Contact:
    """A named person and the Picasa ids that refer to them."""
    name: str
    ids: Dict[str, int] = field(default_factory=dict)

    @property
    def reference_count(self) -> int:
        """Total number of references across all ids."""
        return sum(self.ids.values())

    def to_dict(self) -> Dict[str, Dict[str, int]]:
        return {picasa_id: {"count": count} for picasa_id, count in self.ids.items()}


class ContactDirectory:
    """Mapping of contact name to Picasa ids with reference counts.

    Usage:
        contacts = ContactDirectory()
        contacts.seed([("Jane Doe", "a314094943e17aed")])

        name = contacts.lookup_name_by_id("a314094943e17aed")
        contacts.increment(name, "a314094943e17aed")

    Names keep insertion order. Reverse lookups go through an id index that
    records the first name to claim each id, so lookups are deterministic even
    if a malformed contacts file assigns one id to two names.
    """

    def __init__(self):
        self._contacts: Dict[str, Contact] = {}
        self._id_index: Dict[str, str] = {}

    @classmethod
    def from_file(cls, path: str) -> "ContactDirectory":
        """Build a directory seeded from a Picasa contacts.xml file."""
        directory = cls()
        directory.seed(load_contacts(path))
        return directory

    def seed(self, source: Iterable[Tuple[str, str]]) -> None:
        """Reset the directory and insert every (name, id) with count 0.

        Args:
            source: (name, picasa_id) pairs, in the order they were read.
        """
        self._contacts = {}
        self._id_index = {}

        for name, picasa_id in source:
            contact = self._contacts.get(name)
            if contact is None:
                contact = self._contacts[name] = Contact(name=name)
            elif picasa_id not in contact.ids:
                logger.info(
                    "The contact '%s' already exists with another ID. "
                    "The contact record with ID '%s' will still be processed.",
                    name, picasa_id
                )
            contact.ids[picasa_id] = 0
            self._id_index.setdefault(picasa_id, name)

    def lookup_name_by_id(self, picasa_id: str) -> Optional[str]:
        """Get the name that owns an id, or None if no contact has it."""
        return self._id_index.get(picasa_id)

    def increment(self, name: str, picasa_id: str) -> None:
        """Count one more reference to (name, id), adding either if missing."""
        contact = self._contacts.get(name)

        if contact is None:
            logger.info(
                "The contact '%s' does not exist in the contacts directory. "
                "Adding contact record with ID '%s' and continuing processing.",
                name, picasa_id
            )
            contact = self._contacts[name] = Contact(name=name)
            contact.ids[picasa_id] = 1
        elif picasa_id in contact.ids:
            contact.ids[picasa_id] += 1
        else:
            logger.info(
                "The contact '%s' already exists with ID(s) '%s'. "
                "Adding contact record with ID '%s' and continuing processing.",
                name, ", ".join(contact.ids), picasa_id
            )
            contact.ids[picasa_id] = 1

        self._id_index.setdefault(picasa_id, name)

    def get(self, name: str) -> Optional[Contact]:
        return self._contacts.get(name)

    def count(self, name: str, picasa_id: str) -> Optional[int]:
        """Reference count for (name, id), or None if the pair is unknown."""
        contact = self._contacts.get(name)
        if contact is None:
            return None
        return contact.ids.get(picasa_id)

    def names(self) -> List[str]:
        return list(self._contacts)

    def contacts(self) -> Iterator[Contact]:
        return iter(self._contacts.values())

    def rows(self) -> List[Tuple[str, str, int]]:
        """All (name, id, count) triples sorted by name then id."""
        return [
            (name, picasa_id, self._contacts[name].ids[picasa_id])
            for name in sorted(self._contacts)
            for picasa_id in sorted(self._contacts[name].ids)
        ]

    def to_dict(self) -> Dict[str, Dict[str, Dict[str, int]]]:
        return {name: contact.to_dict() for name, contact in self._contacts.items()}

    def __contains__(self, name: object) -> bool:
        return name in self._contacts

    def __len__(self) -> int:
        return len(self._contacts)

    def __repr__(self) -> str:
        return f"ContactDirectory({len(self._contacts)} contacts, {len(self._id_index)} ids)"


def load_contacts(path: str) -> List[Tuple[str, str]]:
    """Read (name, id) pairs from a Picasa contacts.xml file.

    Any element with a hex ``id`` attribute and a non-empty ``name`` attribute
    is taken as a contact, in document order.

    Args:
        path: Path to contacts.xml.

    Returns:
        List of (name, picasa_id) tuples.

    Raises:
        OSError: If the file cannot be read.
        ContactsFileError: If the file is not well-formed XML.
    """
    with open(path, "rb") as f:
        try:
            root = ET.parse(f).getroot()
        except ET.ParseError as e:
            raise ContactsFileError(f"Cannot parse contacts file '{path}': {e}") from e

    pairs = []
    for element in root.iter():
        picasa_id = element.get("id")
        name = element.get("name")
        if not picasa_id or not name:
            continue
        if not _CONTACT_ID_RE.fullmatch(picasa_id):
            logger.debug("Skipping contact '%s' with non-hex ID '%s'", name, picasa_id)
            continue
        pairs.append((name, picasa_id))

    logger.info("Read %d contact records from '%s'", len(pairs), path)
    return pairs
