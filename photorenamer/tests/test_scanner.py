"""Tests for photorenamer.core.scanner module."""

import os

from photorenamer.core.scanner import PhotoScanner, scan_photos

from conftest import make_file


class TestPhotoScanner:
    """Tests for PhotoScanner class."""

    def test_finds_supported_images(self, sample_folder):
        scanner = PhotoScanner(sample_folder)
        photos = scanner.scan()

        assert [p.filename for p in photos] == ["IMG_0001.jpg", "IMG_0002.JPG", "IMG_0003.png"]
        assert scanner.skipped_count == 1

    def test_not_recursive_by_default(self, sample_folder):
        photos = scan_photos(sample_folder)

        assert "DSC_0100.nef" not in [p.filename for p in photos]

    def test_recursive(self, sample_folder):
        photos = scan_photos(sample_folder, recursive=True)

        assert [p.filename for p in photos][-1] == "DSC_0100.nef"
        assert len(photos) == 4

    def test_photo_fields(self, sample_folder):
        photo = scan_photos(sample_folder)[1]

        assert photo.filepath == os.path.join(sample_folder, "IMG_0002.JPG")
        assert photo.extension == ".JPG"
        assert photo.stem == "IMG_0002"
        assert photo.directory == sample_folder
        assert photo.size == len(b"photo 2")
        assert photo.modified is not None
        assert photo.metadata is None
        assert photo.selected_suggestion is None

    def test_sorted_by_path(self, temp_dir):
        for name in ("c.jpg", "a.jpg", "b.jpg"):
            make_file(temp_dir, name)

        assert [p.filename for p in scan_photos(temp_dir)] == ["a.jpg", "b.jpg", "c.jpg"]

    def test_missing_folder(self, temp_dir):
        scanner = PhotoScanner(os.path.join(temp_dir, "missing"))

        assert scanner.scan() == []
        assert scanner.file_count == 0

    def test_empty_folder(self, temp_dir):
        assert scan_photos(temp_dir) == []

    def test_progress_reports_completion(self, sample_folder):
        calls = []

        PhotoScanner(sample_folder).scan(on_progress=lambda c, t, m: calls.append((c, t, m)))

        assert calls[-1] == (3, 3, "Scan complete")
