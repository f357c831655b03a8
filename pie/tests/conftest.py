"""Pytest configuration and fixtures."""

import logging
import os
import tempfile
import shutil
from typing import Dict, Generator, Optional, Tuple

import pytest

from pie.core.contacts import ContactDirectory


ALICE_ID = "aa95109fb609ca34"
ALICE_OLD_ID = "f4f5e35256dbc1eb"
BOB_ID = "9928f1dc983ded75"
CAROL_ID = "a314094943e17aed"

CONTACTS_XML = f"""<?xml version="1.0" encoding="utf-8"?>
<contacts>
 <contact id="{ALICE_ID}" name="Alice Example" display="Alice" modified_time="2019-01-05T20:11:04+00:00" local_contact="1"/>
 <contact id="{BOB_ID}" name="Bob Sample" display="Bob" modified_time="2019-01-05T20:11:04+00:00" local_contact="1"/>
 <contact id="{ALICE_OLD_ID}" name="Alice Example" display="Alice" modified_time="2015-03-01T10:00:00+00:00" local_contact="1"/>
 <contact id="{CAROL_ID}" name="Carol &amp; Co" display="Carol" modified_time="2015-03-01T10:00:00+00:00" local_contact="1"/>
</contacts>
"""

DINING_INI = f"""[Picasa]
name=2019_01_05 - Dining with Alice
date=43470
location=Port Moody, BC, Canada
description=Line one\\nLine two
[Dinner_0001.jpg]
faces=rect64(aa95109fb609ca34),{ALICE_ID};rect64(6b8399959ebbeb8),{BOB_ID}
star=yes
backuphash=1234
[Dinner_0002.jpg]
faces=rect64(4f5c2b4e8c518ccc),{ALICE_OLD_ID};rect64(0),ffffffffffffffff
hidden=yes
star=yes
[Contacts2]
{ALICE_ID}=Alice Example;;
[encoding]
utf8=1
"""

HIKING_INI = f"""[Picasa]
name=2018_07_14 - Hiking Mt Seymour
date=43295
[Seymour_0001.jpg]
faces=rect64(1000200030004000),{BOB_ID}
[old-name.jpg]
star=yes
[.album:4f2a9c]
name=Seymour
"""

ORIGINALS_INI = """[Picasa]
name=2018_07_14 - Hiking Mt Seymour (original)
"""


def write_file(path: str, content, mode: str = "w") -> str:
    """Write content to path, creating parent directories."""
    os.makedirs(os.path.dirname(path), exist_ok=True)
    if "b" in mode:
        with open(path, mode) as f:
            f.write(content)
    else:
        with open(path, mode, encoding="utf-8", newline="") as f:
            f.write(content)
    return path


def fake_dimensions(sizes: Dict[str, Tuple[int, int]]):
    """Build an image dimensions provider keyed by file basename."""
    calls = []

    def provider(path: str) -> Optional[Tuple[int, int]]:
        calls.append(path)
        return sizes.get(os.path.basename(path))

    provider.calls = calls
    return provider


@pytest.fixture(autouse=True)
def reset_package_logger() -> Generator[None, None, None]:
    """Drop handlers setup_logging() attached to the package logger."""
    yield
    pkg_logger = logging.getLogger("pie")
    for handler in list(pkg_logger.handlers):
        pkg_logger.removeHandler(handler)
        handler.close()
    pkg_logger.setLevel(logging.NOTSET)


@pytest.fixture
def temp_dir() -> Generator[str, None, None]:
    """Create a temporary directory for tests."""
    tmpdir = tempfile.mkdtemp()
    yield tmpdir
    shutil.rmtree(tmpdir)


@pytest.fixture
def contacts_file(temp_dir: str) -> str:
    """Write a Picasa contacts.xml with a duplicated name."""
    return write_file(os.path.join(temp_dir, "contacts", "contacts.xml"), CONTACTS_XML)


@pytest.fixture
def contacts(contacts_file: str) -> ContactDirectory:
    """Global contact directory seeded from the sample contacts.xml."""
    return ContactDirectory.from_file(contacts_file)


@pytest.fixture
def dimensions():
    """Image sizes for the sample album photos.

    Full-scale 65535 dimensions make each decoded coordinate equal to its
    rect64 field. Dinner_0002.jpg is deliberately unreadable.
    """
    return fake_dimensions({
        "Dinner_0001.jpg": (65535, 65535),
        "Seymour_0001.jpg": (65535, 65535),
    })


@pytest.fixture
def sample_albums(temp_dir: str) -> str:
    """Create a sample Picasa albums tree.

    Structure:
        temp_dir/pics/
        ├── 2019_01_05 - Dining with Alice/
        │   ├── .picasa.ini
        │   ├── Dinner_0001.jpg
        │   └── Dinner_0002.jpg
        ├── Trips/
        │   ├── 2018_07_14 - Hiking Mt Seymour/
        │   │   ├── .picasaoriginals/
        │   │   │   └── picasa.ini      (ignored)
        │   │   ├── Picasa.ini
        │   │   └── Seymour_0001.jpg
        │   └── notes.txt
        └── Unsorted/
            └── loose.jpg
    """
    root = os.path.join(temp_dir, "pics")

    dining = os.path.join(root, "2019_01_05 - Dining with Alice")
    write_file(os.path.join(dining, ".picasa.ini"), DINING_INI)
    write_file(os.path.join(dining, "Dinner_0001.jpg"), b"fake jpg data", "wb")
    write_file(os.path.join(dining, "Dinner_0002.jpg"), b"fake jpg data 2", "wb")

    hiking = os.path.join(root, "Trips", "2018_07_14 - Hiking Mt Seymour")
    write_file(os.path.join(hiking, "Picasa.ini"), HIKING_INI)
    write_file(os.path.join(hiking, "Seymour_0001.jpg"), b"fake jpg data 3", "wb")
    write_file(os.path.join(hiking, ".picasaoriginals", "picasa.ini"), ORIGINALS_INI)
    write_file(os.path.join(root, "Trips", "notes.txt"), "not an album")

    write_file(os.path.join(root, "Unsorted", "loose.jpg"), b"fake jpg data 4", "wb")

    return root
