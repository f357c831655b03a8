"""Data models for Picasa Info Extractor."""

from dataclasses import dataclass, field
from typing import Optional, List, Dict, Callable, Any

from pie.core.contacts import ContactDirectory


@dataclass(frozen=True, slots=True)
class Rectangle:
    """A face region in image pixel space.

    Width and height are right - left and bottom - top as decoded; they are
    negative when Picasa stored inverted coordinates. All zeros means the
    image could not be read when the face tag was decoded.
    """
    x_coord: int
    y_coord: int
    width: int
    height: int

    def is_empty(self) -> bool:
        """Check for the all-zero "image unreadable" rectangle."""
        return self.x_coord == 0 and self.y_coord == 0 and self.width == 0 and self.height == 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "xCoord": self.x_coord,
            "yCoord": self.y_coord,
            "width": self.width,
            "height": self.height,
        }


# Contact name -> face region, for one photo
FaceTags = Dict[str, Rectangle]


@dataclass(slots=True)
class FileEntry:
    """Face tags and flags recorded for one photo in an album.

    ``tags`` only holds keys that were set: "hidden" and/or "starred".
    """
    face_tags: FaceTags = field(default_factory=dict)
    tags: Dict[str, bool] = field(default_factory=dict)

    @property
    def hidden(self) -> bool:
        return self.tags.get("hidden", False)

    @property
    def starred(self) -> bool:
        return self.tags.get("starred", False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "facetags": {name: rect.to_dict() for name, rect in self.face_tags.items()},
            "tags": dict(self.tags),
        }


@dataclass
class Album:
    """One Picasa album, built from a single picasa.ini file."""
    directory: str
    name: Optional[str] = None
    date: Optional[str] = None
    location: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    contacts: ContactDirectory = field(default_factory=ContactDirectory)
    files: Dict[str, FileEntry] = field(default_factory=dict)

    def get_file(self, filename: str) -> FileEntry:
        """Get the entry for a file, creating it on first use."""
        entry = self.files.get(filename)
        if entry is None:
            entry = self.files[filename] = FileEntry()
        return entry

    @property
    def face_tag_count(self) -> int:
        return sum(len(entry.face_tags) for entry in self.files.values())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "date": self.date,
            "location": self.location,
            "description": self.description,
            "directory": self.directory,
            "category": self.category,
            "contacts": self.contacts.to_dict(),
            "files": {filename: entry.to_dict() for filename, entry in self.files.items()},
        }


@dataclass
class ExportModel:
    """Everything extracted in one run, ready for the JSON and SQLite writers."""
    albums: Dict[int, Album] = field(default_factory=dict)
    contacts: ContactDirectory = field(default_factory=ContactDirectory)

    def to_dict(self) -> Dict[str, Any]:
        # JSON object keys must be strings
        return {
            "albums": {str(key): album.to_dict() for key, album in self.albums.items()},
            "contacts": self.contacts.to_dict(),
        }


@dataclass
class ExtractionStats:
    """Counts from an extraction run."""
    albums: int = 0
    files: int = 0
    face_tags: int = 0
    tagged_files: int = 0
    contacts: int = 0
    warnings: int = 0
    errors: int = 0

    @classmethod
    def from_model(cls, model: ExportModel) -> "ExtractionStats":
        stats = cls(albums=len(model.albums), contacts=len(model.contacts))
        for album in model.albums.values():
            stats.files += len(album.files)
            stats.face_tags += album.face_tag_count
            stats.tagged_files += sum(1 for entry in album.files.values() if entry.tags)
        return stats


@dataclass
class DryRunResult:
    """Results from a dry-run analysis."""
    descriptor_count: int = 0
    contact_count: int = 0
    exiftool_available: bool = False
    exiftool_path: Optional[str] = None
    errors: List[str] = field(default_factory=list)


@dataclass
class ExtractionRunResult:
    """Results from a full extraction run.

    Returned by PIEOrchestrator.process().
    """
    stats: ExtractionStats
    root_dir: str
    json_file: Optional[str]
    db_file: Optional[str]
    elapsed_time: float
    start_time: str
    end_time: str
    errors: List[str] = field(default_factory=list)


# Type aliases for callbacks
# (current_item, total_items, message) -> None
ProgressCallback = Callable[[int, int, str], None]
