"""Utility functions for file and path operations."""

import os
from typing import Mapping, Optional

from pie.core.errors import OutputExistsError

# Location of Picasa's contacts list relative to the Windows user profile
CONTACTS_RELATIVE_PATH = os.path.join("AppData", "Local", "Google", "Picasa2", "contacts", "contacts.xml")


def exists(path: Optional[str]) -> bool:
    """Check if a path exists.

    Args:
        path: Path to check, or None.

    Returns:
        True if path exists, False if path is None or doesn't exist.
    """
    if path:
        return os.path.exists(path)
    return False


def normalize_path(path: str) -> str:
    """Normalize a path for consistent handling.

    Handles:
    - Trailing slashes
    - Mixed forward/backward slashes
    - User home directory (~)
    - Leading/trailing whitespace

    Args:
        path: Path to normalize.

    Returns:
        Normalized path.
    """
    return os.path.normpath(os.path.expanduser(path.strip()))


def get_default_contacts_path(environ: Optional[Mapping[str, str]] = None) -> Optional[str]:
    """Get the default contacts.xml location from USERPROFILE.

    Under the Windows Subsystem for Linux, USERPROFILE must be shared via
    WSLENV (e.g. WSLENV=USERPROFILE/p) so that it arrives as a /mnt/c/...
    path.

    Args:
        environ: Environment mapping (default: os.environ).

    Returns:
        Path to contacts.xml, or None if USERPROFILE is not set.
    """
    environ = os.environ if environ is None else environ
    profile = environ.get("USERPROFILE")
    if not profile:
        return None
    return os.path.join(profile, CONTACTS_RELATIVE_PATH)


def same_output_path(first: str, second: str) -> bool:
    """Check if two output paths name the same file, ignoring case."""
    return os.path.abspath(first).casefold() == os.path.abspath(second).casefold()


def check_output_path(path: str, overwrite: bool, remove: bool = False) -> None:
    """Make sure an output file may be written.

    Args:
        path: Output file path.
        overwrite: Whether an existing file may be replaced.
        remove: If True, delete an existing file (used for databases, which
            are built from scratch).

    Raises:
        OutputExistsError: If the file exists and overwrite is False.
        OSError: If the existing file cannot be deleted.
    """
    if not os.path.exists(path):
        return
    if not overwrite:
        raise OutputExistsError(
            f"Cannot overwrite the output file '{path}' without the overwrite flag."
        )
    if remove:
        os.remove(path)
