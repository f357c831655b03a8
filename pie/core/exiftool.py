"""ExifTool access for Picasa Info Extractor.

Face tag regions are stored as fractions of the image size, so every photo
with face tags needs its pixel dimensions read. A single ExifTool process is
kept running for the whole extraction.
"""

import logging
import os
import shutil
import sys
from typing import Any, Dict, Optional, Tuple

logger = logging.getLogger(__name__)

# Bundled copy, relative to the project root
EXIFTOOL_DIR = os.path.join("tools", "exiftool")
EXIFTOOL_EXE = "exiftool.exe" if sys.platform == "win32" else "exiftool"

DIMENSION_TAGS = ["ImageWidth", "ImageHeight"]

_PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


def _bundled_exiftool(base_dir: Optional[str]) -> str:
    return os.path.join(base_dir or _PROJECT_ROOT, EXIFTOOL_DIR, EXIFTOOL_EXE)


def get_exiftool_path(base_dir: Optional[str] = None) -> Optional[str]:
    """Locate the ExifTool executable.

    An exiftool on PATH wins over the bundled tools/exiftool copy.

    Args:
        base_dir: Directory holding tools/exiftool (default: project root).

    Returns:
        Executable name or path, or None if there is none.
    """
    if shutil.which("exiftool"):
        return "exiftool"

    bundled = _bundled_exiftool(base_dir)
    if os.path.exists(bundled):
        return bundled

    logger.warning("ExifTool not found. Install from https://exiftool.org/")
    return None


def is_exiftool_available(base_dir: Optional[str] = None) -> bool:
    """Check for ExifTool without logging or starting it."""
    return bool(shutil.which("exiftool")) or os.path.exists(_bundled_exiftool(base_dir))


def get_install_instructions() -> str:
    return (
        "ExifTool is needed to read image sizes for face tag regions.\n"
        "  1. Download from https://exiftool.org/\n"
        "  2. Place it in PATH or in ./tools/exiftool/\n"
        "Without it, every face tag region is written as zeros."
    )


def _find_tag(metadata: Dict[str, Any], tag: str) -> Optional[int]:
    """Get a numeric tag regardless of its group prefix (File:, PNG:, ...)."""
    for key, value in metadata.items():
        if key == tag or key.endswith(":" + tag):
            try:
                return int(value)
            except (TypeError, ValueError):
                return None
    return None


class ExifToolManager:
    """Reads image dimensions through one long-running ExifTool process.

    Usage:
        with ExifToolManager() as et:
            size = et.get_image_dimensions("/photos/album/Dinner_0001.jpg")

    The bound get_image_dimensions method is what FaceTagResolver expects.
    When ExifTool could not be started it keeps answering None, so every
    face region decodes to zeros.
    """

    def __init__(self, base_dir: Optional[str] = None):
        self._base_dir = base_dir
        self._exiftool_path: Optional[str] = None
        self._helper = None

    def start(self) -> bool:
        """Start the ExifTool process.

        Returns:
            True if ExifTool is running, False if it is missing or failed.
        """
        try:
            import exiftool
        except ImportError:
            logger.warning("pyexiftool not installed. Run: pip install pyexiftool")
            return False

        self._exiftool_path = get_exiftool_path(self._base_dir)
        if self._exiftool_path is None:
            return False

        try:
            helper = exiftool.ExifToolHelper(executable=self._exiftool_path)
            helper.run()
        except Exception as e:
            logger.error("Failed to start ExifTool '%s': %s", self._exiftool_path, e)
            return False

        self._helper = helper
        logger.info("Started ExifTool '%s'", self._exiftool_path)
        return True

    def stop(self) -> None:
        if self._helper is None:
            return
        try:
            self._helper.terminate()
        except Exception as e:
            logger.debug("Error stopping ExifTool: %s", e)
        self._helper = None

    def _read_dimension_tags(self, filepath: str) -> Dict[str, Any]:
        try:
            result = self._helper.get_tags(filepath, DIMENSION_TAGS)
        except Exception as e:
            logger.debug("ExifTool could not read '%s': %s", filepath, e)
            return {}
        return result[0] if result else {}

    def get_image_dimensions(self, filepath: str) -> Optional[Tuple[int, int]]:
        """Read an image's pixel width and height.

        Returns:
            (width, height), or None if the file is missing, unreadable or
            has no size tags, or ExifTool is not running.
        """
        if self._helper is None or not os.path.isfile(filepath):
            return None

        metadata = self._read_dimension_tags(filepath)
        width = _find_tag(metadata, "ImageWidth")
        height = _find_tag(metadata, "ImageHeight")
        if width is None or height is None:
            return None
        return width, height

    @property
    def is_running(self) -> bool:
        return self._helper is not None

    @property
    def exiftool_path(self) -> Optional[str]:
        return self._exiftool_path

    def __enter__(self) -> "ExifToolManager":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()
