"""Logging utilities for Picasa Info Extractor."""

import logging
import os
import sys
from typing import Any, Optional

# All pie.* module loggers propagate here
PACKAGE_LOGGER = "pie"

DEFAULT_LOG_FILE = "extractpicasainfo.log"
LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def setup_logging(
    log_file: Optional[str] = DEFAULT_LOG_FILE,
    verbose: bool = False
) -> logging.Logger:
    """Configure the package logger for a command-line run.

    The log file is rewritten on every run and receives INFO and above
    (DEBUG with verbose). The console only shows warnings and errors unless
    verbose is set.

    Args:
        log_file: Log file path, or None to log to the console only.
        verbose: Whether to include debug output in the file and info
            output on the console.

    Returns:
        The configured package logger.
    """
    pkg_logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(pkg_logger.handlers):
        pkg_logger.removeHandler(handler)
        handler.close()

    pkg_logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    formatter = logging.Formatter(LOG_FORMAT)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
        file_handler.setFormatter(formatter)
        pkg_logger.addHandler(file_handler)

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(logging.INFO if verbose else logging.WARNING)
    console.setFormatter(formatter)
    pkg_logger.addHandler(console)

    return pkg_logger


class LogCounter(logging.Handler):
    """Counts warnings and errors logged while attached.

    Usage:
        with LogCounter() as counter:
            run_extraction()
        print(counter.warnings, counter.errors)
    """

    def __init__(self, logger_name: str = PACKAGE_LOGGER):
        super().__init__(level=logging.WARNING)
        self.logger_name = logger_name
        self.warnings = 0
        self.errors = 0

    def emit(self, record: logging.LogRecord) -> None:
        if record.levelno >= logging.ERROR:
            self.errors += 1
        elif record.levelno >= logging.WARNING:
            self.warnings += 1

    def __enter__(self) -> "LogCounter":
        logging.getLogger(self.logger_name).addHandler(self)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        logging.getLogger(self.logger_name).removeHandler(self)


class SummaryWriter:
    """Writes a short plain-text summary of an extraction run."""

    def __init__(self, output_dir: str, filename: str = "summary.txt"):
        """Initialize summary writer.

        Args:
            output_dir: Directory to write the summary into.
            filename: Name of summary file (default: summary.txt).
        """
        self.output_dir = output_dir
        self.filepath = os.path.join(output_dir, filename)

    def write_summary(self, result: Any) -> str:
        """Write the summary file for an ExtractionRunResult.

        Returns:
            Path to summary file.
        """
        elapsed_time = result.elapsed_time
        if elapsed_time >= 60:
            minutes = int(elapsed_time // 60)
            seconds = int(elapsed_time % 60)
            duration = f"{minutes}m {seconds}s"
        else:
            duration = f"{elapsed_time:.1f}s"

        stats = result.stats
        os.makedirs(self.output_dir, exist_ok=True)

        with open(self.filepath, "w", encoding="utf-8") as f:
            f.write("Picasa Info Extractor - Extraction Summary\n")
            f.write("=" * 42 + "\n\n")
            f.write(f"Albums root: {result.root_dir}\n")
            if result.json_file:
                f.write(f"JSON file:   {result.json_file}\n")
            if result.db_file:
                f.write(f"Database:    {result.db_file}\n")
            f.write(f"Started:     {result.start_time}\n")
            f.write(f"Completed:   {result.end_time}\n")
            f.write(f"Duration:    {duration}\n\n")

            f.write(f"Albums:          {stats.albums:,}\n")
            f.write(f"Files:           {stats.files:,}\n")
            f.write(f"  Face tags:     {stats.face_tags:,}\n")
            f.write(f"  Tagged files:  {stats.tagged_files:,}\n")
            f.write(f"Contacts:        {stats.contacts:,}\n")

            f.write("\n")
            f.write(f"Warnings: {stats.warnings:,}\n")
            f.write(f"Errors:   {stats.errors:,}\n")

        return self.filepath
