"""High-level orchestrator for Picasa Info Extractor.

Coordinates contact loading, album discovery and output writing.
Used by the CLI.
"""

import logging
import os
import time
from typing import Optional

from pie.core.album import AlbumParser
from pie.core.contacts import ContactDirectory
from pie.core.errors import PIEError
from pie.core.exiftool import ExifToolManager, get_exiftool_path, is_exiftool_available
from pie.core.export import write_database, write_json
from pie.core.faces import FaceTagResolver
from pie.core.logger import LogCounter
from pie.core.models import (
    DryRunResult, ExportModel, ExtractionRunResult, ExtractionStats, ProgressCallback
)
from pie.core.scanner import AlbumScanner, find_descriptors
from pie.core.utils import (
    check_output_path, exists, get_default_contacts_path, same_output_path
)

logger = logging.getLogger(__name__)


class PIEOrchestrator:
    """Coordinates a Picasa extraction run.

    Usage:
        orchestrator = PIEOrchestrator(
            root_dir="/path/to/pictures",
            json_file="/path/to/extract.json",
            db_file="/path/to/extract.db",  # optional
        )

        # Dry run to preview
        result = orchestrator.dry_run()
        print(f"Would parse: {result.descriptor_count} albums")

        # Actual extraction
        result = orchestrator.process(on_progress=my_callback)
        print(f"Extracted: {result.stats.albums} albums")

    Every call builds its own contact directory and album scanner, so
    repeated runs never share counts.
    """

    def __init__(
        self,
        root_dir: str,
        contacts_file: Optional[str] = None,
        json_file: Optional[str] = None,
        db_file: Optional[str] = None,
        overwrite: bool = False,
        use_exiftool: bool = True
    ):
        """Initialize orchestrator.

        Args:
            root_dir: Root albums directory.
            contacts_file: Picasa contacts.xml (default: under USERPROFILE).
            json_file: Optional JSON output path.
            db_file: Optional SQLite output path.
            overwrite: Whether existing output files may be replaced.
            use_exiftool: If False, image sizes are never read and every
                face region is written as zeros.
        """
        self.root_dir = os.path.abspath(root_dir)
        self.contacts_file = contacts_file or get_default_contacts_path()
        self.json_file = os.path.abspath(json_file) if json_file else None
        self.db_file = os.path.abspath(db_file) if db_file else None
        self.overwrite = overwrite
        self.use_exiftool = use_exiftool

    def validate_outputs(self) -> None:
        """Check output settings before any work is done.

        Raises:
            ValueError: If no output is configured or both outputs are the
                same file.
            OutputExistsError: If an output exists and overwrite is off.
        """
        if not self.json_file and not self.db_file:
            raise ValueError(
                "Picasa information must be written to at least one output: "
                "a JSON file or an SQLite database file."
            )
        if self.json_file and self.db_file and same_output_path(self.json_file, self.db_file):
            raise ValueError(
                f"The JSON output file '{self.json_file}' cannot be the same as "
                f"the SQLite database output file '{self.db_file}'."
            )
        for path in (self.json_file, self.db_file):
            if path:
                check_output_path(path, self.overwrite)

    def load_contacts(self) -> ContactDirectory:
        """Build a fresh global contact directory from contacts.xml.

        Raises:
            PIEError: If no contacts file is configured or can be parsed.
            OSError: If the contacts file cannot be read.
        """
        if not self.contacts_file:
            raise PIEError(
                "No contacts file given and USERPROFILE is not set; "
                "cannot locate the Picasa contacts.xml file."
            )
        return ContactDirectory.from_file(self.contacts_file)

    def dry_run(self, on_progress: Optional[ProgressCallback] = None) -> DryRunResult:
        """Count albums and contacts without parsing albums or writing output.

        Args:
            on_progress: Optional callback for progress updates.

        Returns:
            DryRunResult with counts and any problems found.
        """
        result = DryRunResult()

        if not exists(self.root_dir):
            result.errors.append(f"Albums directory does not exist: {self.root_dir}")
            return result

        if self.use_exiftool:
            result.exiftool_available = is_exiftool_available()
            if result.exiftool_available:
                result.exiftool_path = get_exiftool_path()

        try:
            result.contact_count = len(self.load_contacts())
        except (PIEError, OSError) as e:
            result.errors.append(f"Contacts: {e}")

        try:
            for descriptor in find_descriptors(self.root_dir):
                result.descriptor_count += 1
                if on_progress:
                    on_progress(result.descriptor_count, result.descriptor_count,
                                f"Found: {os.path.basename(os.path.dirname(descriptor))}")
        except OSError as e:
            result.errors.append(str(e))

        if on_progress:
            on_progress(result.descriptor_count, result.descriptor_count, "Scan complete")

        return result

    def extract(self, on_progress: Optional[ProgressCallback] = None) -> ExportModel:
        """Load contacts and parse every album under the root directory.

        Raises:
            OSError: On unreadable directories, descriptors or contacts file.
            PIEError: On malformed face tags, duplicate keys or a bad
                contacts file.
        """
        contacts = self.load_contacts()
        logger.info("Loaded %d contacts from '%s'", len(contacts), self.contacts_file)

        exiftool = ExifToolManager()
        if self.use_exiftool and not exiftool.start():
            logger.warning("ExifTool is not available; face tag regions will be zeros.")

        try:
            resolver = FaceTagResolver(exiftool.get_image_dimensions)
            scanner = AlbumScanner(AlbumParser(resolver))
            albums = scanner.walk(self.root_dir, contacts, on_progress)
        finally:
            exiftool.stop()

        return ExportModel(albums=albums, contacts=contacts)

    def write_outputs(self, model: ExportModel) -> None:
        """Write the JSON and/or SQLite outputs configured for this run.

        The database is built first, so a constraint failure there leaves
        neither output behind.
        """
        if self.json_file:
            check_output_path(self.json_file, self.overwrite)

        if self.db_file:
            check_output_path(self.db_file, self.overwrite, remove=True)
            write_database(model, self.db_file)

        if self.json_file:
            write_json(model, self.json_file)

    def process(self, on_progress: Optional[ProgressCallback] = None) -> ExtractionRunResult:
        """Run a full extraction and write the outputs.

        Args:
            on_progress: Optional callback for progress updates.

        Returns:
            ExtractionRunResult with statistics and output paths.

        Raises:
            ValueError, PIEError, OSError, sqlite3.Error: On fatal problems.
                Nothing is written if extraction fails.
        """
        start_time = time.time()
        start_date = time.strftime("%Y-%m-%d %H:%M:%S")

        self.validate_outputs()
        logger.info("Extracting Picasa information from '%s'.", self.root_dir)

        with LogCounter() as counter:
            model = self.extract(on_progress)
            if on_progress:
                on_progress(len(model.albums), len(model.albums), "Writing output...")
            self.write_outputs(model)

        stats = ExtractionStats.from_model(model)
        stats.warnings = counter.warnings
        stats.errors = counter.errors

        elapsed = round(time.time() - start_time, 3)
        logger.info("Completed extraction of %d albums in %ss.", stats.albums, elapsed)

        return ExtractionRunResult(
            stats=stats,
            root_dir=self.root_dir,
            json_file=self.json_file,
            db_file=self.db_file,
            elapsed_time=elapsed,
            start_time=start_date,
            end_time=time.strftime("%Y-%m-%d %H:%M:%S"),
        )
