"""Core extraction logic for Picasa Info Extractor."""

from pie.core.errors import (
    PIEError,
    FormatError,
    MalformedFaceTagError,
    DuplicateKeyError,
    ContactsFileError,
    OutputExistsError,
)

from pie.core.contacts import (
    Contact,
    ContactDirectory,
    load_contacts,
)

from pie.core.models import (
    Rectangle,
    FaceTags,
    FileEntry,
    Album,
    ExportModel,
    ExtractionStats,
    DryRunResult,
    ExtractionRunResult,
    ProgressCallback,
)

from pie.core.utils import (
    exists,
    normalize_path,
    get_default_contacts_path,
    check_output_path,
)

from pie.core.logger import (
    setup_logging,
    LogCounter,
    SummaryWriter,
)

from pie.core.faces import (
    decode_rectangle,
    parse_face_tags,
    FaceTagResolver,
    UNASSIGNED_CONTACT_ID,
)

from pie.core.album import (
    AlbumParser,
    get_album_category,
    convert_album_date,
    CATEGORY_MAP,
)

from pie.core.scanner import (
    AlbumScanner,
    find_descriptors,
    is_album_descriptor,
)

from pie.core.exiftool import (
    get_exiftool_path,
    is_exiftool_available,
    ExifToolManager,
)

from pie.core.export import (
    write_json,
    write_database,
    DatabaseWriter,
)

from pie.core.orchestrator import (
    PIEOrchestrator,
)

__all__ = [
    # Errors
    "PIEError",
    "FormatError",
    "MalformedFaceTagError",
    "DuplicateKeyError",
    "ContactsFileError",
    "OutputExistsError",
    # Contacts
    "Contact",
    "ContactDirectory",
    "load_contacts",
    # Models
    "Rectangle",
    "FaceTags",
    "FileEntry",
    "Album",
    "ExportModel",
    "ExtractionStats",
    "DryRunResult",
    "ExtractionRunResult",
    "ProgressCallback",
    # Utils
    "exists",
    "normalize_path",
    "get_default_contacts_path",
    "check_output_path",
    # Logger
    "setup_logging",
    "LogCounter",
    "SummaryWriter",
    # Faces
    "decode_rectangle",
    "parse_face_tags",
    "FaceTagResolver",
    "UNASSIGNED_CONTACT_ID",
    # Albums
    "AlbumParser",
    "get_album_category",
    "convert_album_date",
    "CATEGORY_MAP",
    # Scanner
    "AlbumScanner",
    "find_descriptors",
    "is_album_descriptor",
    # ExifTool
    "get_exiftool_path",
    "is_exiftool_available",
    "ExifToolManager",
    # Export
    "write_json",
    "write_database",
    "DatabaseWriter",
    # Orchestrator
    "PIEOrchestrator",
]
