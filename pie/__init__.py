"""Picasa Info Extractor - Extract Picasa album, face tag and contact details.

High-level API:
    from pie import PIEOrchestrator

    orchestrator = PIEOrchestrator(
        "/path/to/pictures",
        contacts_file="/path/to/contacts.xml",
        json_file="extract.json",
    )

    # Preview what will be extracted
    result = orchestrator.dry_run()
    print(f"Found {result.descriptor_count} albums")

    # Extract and write outputs
    result = orchestrator.process()
    print(f"Extracted {result.stats.albums} albums")
"""

__version__ = "1.0.0"

# Public API exports
from pie.core.orchestrator import PIEOrchestrator
from pie.core.models import (
    Album,
    DryRunResult,
    ExportModel,
    ExtractionRunResult,
    ExtractionStats,
    FileEntry,
    Rectangle,
)
from pie.core.contacts import Contact, ContactDirectory

__all__ = [
    "PIEOrchestrator",
    "Album",
    "DryRunResult",
    "ExportModel",
    "ExtractionRunResult",
    "ExtractionStats",
    "FileEntry",
    "Rectangle",
    "Contact",
    "ContactDirectory",
    "__version__",
]
