"""Pytest configuration and fixtures."""

import os
import tempfile
import shutil
from datetime import datetime
from typing import Generator, List

import pytest

from photorenamer.core.models import CameraInfo, GpsCoordinates, PhotoMetadata


@pytest.fixture
def temp_dir() -> Generator[str, None, None]:
    """Create a temporary directory for tests."""
    tmpdir = tempfile.mkdtemp()
    yield tmpdir
    shutil.rmtree(tmpdir)


def make_file(directory: str, name: str, data: bytes = b"fake image data") -> str:
    """Create a file and return its path."""
    path = os.path.join(directory, name)
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "wb") as f:
        f.write(data)
    return path


@pytest.fixture
def sample_folder(temp_dir: str) -> str:
    """Create a sample photo folder for testing.

    Structure:
        temp_dir/
        ├── IMG_0001.jpg
        ├── IMG_0002.JPG
        ├── IMG_0003.png
        ├── notes.txt
        └── Trip/
            └── DSC_0100.nef
    """
    make_file(temp_dir, "IMG_0001.jpg", b"photo 1")
    make_file(temp_dir, "IMG_0002.JPG", b"photo 2")
    make_file(temp_dir, "IMG_0003.png", b"photo 3")
    make_file(temp_dir, "notes.txt", b"not a photo")
    make_file(temp_dir, os.path.join("Trip", "DSC_0100.nef"), b"raw photo")
    return temp_dir


@pytest.fixture
def full_metadata() -> PhotoMetadata:
    """Metadata with date, GPS and camera."""
    return PhotoMetadata(
        original_filename="IMG_0001.jpg",
        date_taken=datetime(2023, 6, 15, 14, 30, 0),
        location=GpsCoordinates(48.8584, 2.2945),
        camera=CameraInfo(make="Canon", model="Canon EOS 5D Mark IV"),
    )


@pytest.fixture
def empty_metadata() -> PhotoMetadata:
    """Metadata with nothing but a filename."""
    return PhotoMetadata(original_filename="IMG_0001.jpg")


class FakeMetadataReader:
    """Stands in for MetadataReader; returns fixed metadata per filename."""

    def __init__(self, by_name=None, default: PhotoMetadata = None):
        self.by_name = by_name or {}
        self.default = default
        self.calls: List[List[str]] = []

    def extract_batch(self, filepaths: List[str]) -> List[PhotoMetadata]:
        self.calls.append(list(filepaths))
        results = []
        for path in filepaths:
            name = os.path.basename(path)
            metadata = self.by_name.get(name, self.default)
            if metadata is None:
                metadata = PhotoMetadata(original_filename=name)
            results.append(metadata)
        return results


class FakeGeocoder:
    """Stands in for NominatimGeocoder; no network access."""

    def __init__(self, info=None, error: Exception = None):
        self.info = info
        self.error = error
        self.calls = []

    def reverse_lookup(self, latitude, longitude):
        self.calls.append((latitude, longitude))
        if self.error:
            raise self.error
        return self.info
