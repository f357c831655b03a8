"""Command-line interface for Picasa Info Extractor."""

import argparse
import logging
import os
import shutil
import sqlite3
import sys
from typing import List, Optional

from tqdm import tqdm

from pie import __version__
from pie.core.errors import PIEError
from pie.core.exiftool import get_install_instructions
from pie.core.logger import DEFAULT_LOG_FILE, SummaryWriter, setup_logging
from pie.core.orchestrator import PIEOrchestrator
from pie.core.utils import exists, normalize_path
from pie.cli.wizard import run_wizard

logger = logging.getLogger(__name__)


# Program description
DESCRIPTION = """Picasa Info Extractor

Extracts Picasa album and contact details to a JSON file and/or an SQLite
database file.

The program walks the directory tree rooted at the given folder and treats any
folder with a .picasa.ini or Picasa.ini file (regardless of capitalization) as
a Picasa photo album. .picasaoriginals folders are ignored.

It needs:
  1. Picasa's contacts list, by default at
     %USERPROFILE%/AppData/Local/Google/Picasa2/contacts/contacts.xml
     (under WSL, share USERPROFILE with WSLENV=USERPROFILE/p). Use
     --contacts to point elsewhere.
  2. The images referenced in each picasa.ini, in the same folder, to size
     face tag regions. Regions for missing images are written as zeros.

Examples:
  python -m pie --jsonfile extract.json ~/pics
  python -m pie -j extract.json -d extract.db --overwrite ~/pics
"""


def create_progress_callback(desc: str = "Extracting"):
    """Create a tqdm-based progress callback.

    Args:
        desc: Description for progress bar.

    Returns:
        Tuple of (callback function, tqdm instance).
    """
    pbar = tqdm(total=0, desc=desc, unit=" albums")

    # Calculate safe message width based on terminal size
    terminal_width = shutil.get_terminal_size().columns
    max_desc_width = max(20, min(80, terminal_width - 40))

    def callback(current: int, total: int, message: str):
        pbar.total = total
        pbar.n = current
        if len(message) > max_desc_width:
            message = message[:max_desc_width - 3] + "..."
        pbar.set_description(message)
        pbar.refresh()

    return callback, pbar


def run_dry_run(directory: str, contacts_file: Optional[str]) -> int:
    """Run dry-run mode.

    Args:
        directory: Root albums directory.
        contacts_file: Optional contacts.xml path.

    Returns:
        Exit code (0 for success).
    """
    print("\n=== DRY RUN MODE ===")
    print("No albums will be parsed and no files will be written.\n")

    orchestrator = PIEOrchestrator(directory, contacts_file=contacts_file)
    print(f"Albums directory: {orchestrator.root_dir}")
    print(f"Contacts file: {orchestrator.contacts_file}")

    callback, pbar = create_progress_callback("Scanning")
    try:
        result = orchestrator.dry_run(on_progress=callback)
    finally:
        pbar.close()

    print("\nFound:")
    print(f"  {result.descriptor_count} Picasa albums")
    print(f"  {result.contact_count} contacts")

    if result.exiftool_available:
        print(f"\nExifTool: Found at {result.exiftool_path}")
    else:
        print("\nExifTool: NOT FOUND")
        print(get_install_instructions())

    if result.errors:
        print("\nProblems:")
        for error in result.errors:
            print(f"  {error}")

    print("\n=== END DRY RUN ===")
    return 1 if result.errors else 0


def run_process(
    directory: str,
    contacts_file: Optional[str],
    json_file: Optional[str],
    db_file: Optional[str],
    overwrite: bool,
    log_file: Optional[str]
) -> int:
    """Run the extraction.

    Returns:
        Exit code (0 for success, 1 for fatal errors, 2 if errors were logged).
    """
    orchestrator = PIEOrchestrator(
        directory,
        contacts_file=contacts_file,
        json_file=json_file,
        db_file=db_file,
        overwrite=overwrite
    )

    print("\nExtraction started...")
    print(f"Working in directory: {orchestrator.root_dir}")

    callback, pbar = create_progress_callback("Extracting")
    try:
        result = orchestrator.process(on_progress=callback)
    except KeyboardInterrupt:
        pbar.close()
        print("\n\nInterrupted! No output was written.")
        return 130
    except (PIEError, OSError, ValueError, sqlite3.Error) as e:
        pbar.close()
        logger.critical("Extraction failed: %s", e)
        print(f"\nError: {e}")
        return 1
    pbar.close()

    if log_file:
        log_path = os.path.abspath(log_file)
        stem = os.path.splitext(os.path.basename(log_path))[0]
        summary = SummaryWriter(
            os.path.dirname(log_path), filename=f"{stem}.summary.txt"
        ).write_summary(result)
        logger.info("Summary written to '%s'", summary)

    print("\nFinished!")
    print(f"Albums: {result.stats.albums}")
    print(f"  Files: {result.stats.files}")
    print(f"  Face tags: {result.stats.face_tags}")
    print(f"Contacts: {result.stats.contacts}")
    print(f"Time used: {result.elapsed_time} seconds")
    if result.json_file:
        print(f"\nJSON file:\n  {result.json_file}")
    if result.db_file:
        print(f"SQLite database:\n  {result.db_file}")

    if result.stats.warnings or result.stats.errors:
        print(f"\n{result.stats.warnings} warnings, {result.stats.errors} errors")
        if log_file:
            print(f"See {log_file} for details.")

    if result.stats.errors > 0:
        return 2

    return 0


def parse_args(args: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        args: Arguments to parse (default: sys.argv[1:]).

    Returns:
        Parsed arguments namespace.
    """
    parser = argparse.ArgumentParser(
        description=DESCRIPTION,
        formatter_class=argparse.RawTextHelpFormatter
    )

    parser.add_argument(
        "-V", "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    parser.add_argument(
        "directory",
        help="The root albums directory containing Picasa folders",
        nargs="?",
        default=None
    )

    parser.add_argument(
        "-j", "--jsonfile",
        help="Write the Picasa information to this JSON file",
        type=str,
        default=None
    )

    parser.add_argument(
        "-d", "--dbfile",
        help="Write the Picasa information to this SQLite database file",
        type=str,
        default=None
    )

    parser.add_argument(
        "-o", "--overwrite",
        help="Overwrite the output files if they exist instead of aborting",
        action="store_true"
    )

    parser.add_argument(
        "-c", "--contacts",
        help="Path to Picasa's contacts.xml (default: under %%USERPROFILE%%)",
        type=str,
        default=None
    )

    parser.add_argument(
        "-l", "--log-file",
        help=f"Log file (default: ./{DEFAULT_LOG_FILE})",
        type=str,
        default=DEFAULT_LOG_FILE
    )

    parser.add_argument(
        "--dry-run",
        help="Count albums and contacts without extracting anything",
        action="store_true"
    )

    parser.add_argument(
        "-v", "--verbose",
        help="Log debug details to the log file and progress to the console",
        action="store_true"
    )

    return parser.parse_args(args)


def validate_args(parsed: argparse.Namespace) -> Optional[str]:
    """Check option combinations argparse can't express.

    Returns:
        An error message, or None if the options are usable.
    """
    if parsed.dry_run:
        return None

    if not parsed.jsonfile and not parsed.dbfile:
        return ("Picasa information must be output to at least one of the "
                "supported output formats: a JSON file (--jsonfile) or an "
                "SQLite database file (--dbfile).")

    for option, path in (("JSON", parsed.jsonfile), ("SQLite database", parsed.dbfile)):
        if path and exists(path) and not parsed.overwrite:
            return (f"The {option} output file '{path}' exists. "
                    "Consider using the --overwrite switch.")

    if parsed.jsonfile and parsed.dbfile and parsed.jsonfile.casefold() == parsed.dbfile.casefold():
        return (f"The JSON output file '{parsed.jsonfile}' cannot be the same "
                f"as the SQLite database output file '{parsed.dbfile}'.")

    return None


def main(args: Optional[List[str]] = None) -> int:
    """Main entry point for CLI.

    Args:
        args: Command-line arguments (default: sys.argv[1:]).

    Returns:
        Exit code (0 for success, non-zero for error).
    """
    parsed = parse_args(args)

    error = validate_args(parsed)
    if error:
        print(f"Error: {error}", file=sys.stderr)
        return 1

    directory = parsed.directory
    if not directory:
        directory = run_wizard()
        if not directory:
            return 1

    directory = normalize_path(directory)
    if not os.path.isdir(directory):
        print(f"Error: Directory does not exist: {directory}", file=sys.stderr)
        return 1

    contacts_file = normalize_path(parsed.contacts) if parsed.contacts else None

    if parsed.dry_run:
        return run_dry_run(directory, contacts_file)

    log_file = normalize_path(parsed.log_file) if parsed.log_file else None
    setup_logging(log_file, verbose=parsed.verbose)
    logger.info("*** Executing Picasa Info Extractor %s. ***", __version__)

    exit_code = run_process(
        directory,
        contacts_file=contacts_file,
        json_file=normalize_path(parsed.jsonfile) if parsed.jsonfile else None,
        db_file=normalize_path(parsed.dbfile) if parsed.dbfile else None,
        overwrite=parsed.overwrite,
        log_file=log_file
    )

    logger.info("*** Completed executing Picasa Info Extractor. ***")
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
