"""Interactive prompt for Picasa Info Extractor."""

from typing import Optional


def run_wizard() -> Optional[str]:
    """Ask the user for the root albums directory.

    Returns:
        Path entered by user, or None if cancelled.
    """
    print("\nNo albums directory was given on the command line.")

    try:
        path = input("Enter the path to your root Picasa albums folder: ")
        return path.strip() if path and path.strip() else None
    except (KeyboardInterrupt, EOFError):
        print("\nCancelled.")
        return None
