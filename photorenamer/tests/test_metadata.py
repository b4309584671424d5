"""Tests for photorenamer.core.metadata module."""

import os
from datetime import datetime
from unittest.mock import MagicMock

import pytest

from photorenamer.core.metadata import (
    EXTRACTION_ERROR_KEY,
    MetadataReader,
    extract_camera,
    extract_date,
    extract_gps,
    fallback_metadata,
    file_date,
    format_exposure,
    metadata_from_tags,
    parse_exif_date,
)

from conftest import make_file


class TestParseExifDate:
    """Tests for parse_exif_date()."""

    def test_standard(self):
        assert parse_exif_date("2023:06:15 14:30:00") == datetime(2023, 6, 15, 14, 30, 0)

    def test_subseconds_and_offset_ignored(self):
        assert parse_exif_date("2023:06:15 14:30:00.123+02:00") == datetime(2023, 6, 15, 14, 30, 0)

    @pytest.mark.parametrize("value", [None, "", "0000:00:00 00:00:00", "not a date", 20230615])
    def test_invalid(self, value):
        assert parse_exif_date(value) is None


class TestExtractDate:
    """Tests for extract_date()."""

    def test_prefers_original(self):
        tags = {
            "EXIF:ModifyDate": "2024:01:01 00:00:00",
            "EXIF:CreateDate": "2023:07:01 00:00:00",
            "EXIF:DateTimeOriginal": "2023:06:15 14:30:00",
        }
        assert extract_date(tags) == datetime(2023, 6, 15, 14, 30)

    def test_falls_back_to_digitized(self):
        tags = {
            "EXIF:DateTimeOriginal": "0000:00:00 00:00:00",
            "EXIF:CreateDate": "2023:07:01 09:00:00",
            "EXIF:ModifyDate": "2024:01:01 00:00:00",
        }
        assert extract_date(tags) == datetime(2023, 7, 1, 9, 0)

    def test_falls_back_to_modify_date(self):
        assert extract_date({"EXIF:ModifyDate": "2024:01:01 10:00:00"}) == datetime(2024, 1, 1, 10, 0)

    def test_none(self):
        assert extract_date({}) is None


class TestExtractGps:
    """Tests for extract_gps()."""

    def test_composite_signed(self):
        gps = extract_gps({"Composite:GPSLatitude": -33.8568, "Composite:GPSLongitude": 151.2153})

        assert gps.latitude == -33.8568
        assert gps.longitude == 151.2153

    def test_exif_with_refs(self):
        gps = extract_gps({
            "EXIF:GPSLatitude": 33.8568,
            "EXIF:GPSLatitudeRef": "S",
            "EXIF:GPSLongitude": 70.5,
            "EXIF:GPSLongitudeRef": "W",
        })

        assert gps.latitude == -33.8568
        assert gps.longitude == -70.5

    def test_altitude_below_sea_level(self):
        gps = extract_gps({
            "Composite:GPSLatitude": 31.5,
            "Composite:GPSLongitude": 35.5,
            "EXIF:GPSAltitude": 430,
            "EXIF:GPSAltitudeRef": 1,
        })

        assert gps.altitude == -430

    def test_zero_zero_is_valid(self):
        gps = extract_gps({"Composite:GPSLatitude": 0, "Composite:GPSLongitude": 0})

        assert gps is not None

    def test_out_of_range(self):
        assert extract_gps({"Composite:GPSLatitude": 95, "Composite:GPSLongitude": 10}) is None

    def test_missing(self):
        assert extract_gps({"EXIF:GPSLatitude": 10}) is None


class TestExtractCamera:
    """Tests for extract_camera()."""

    def test_full(self):
        camera = extract_camera({
            "EXIF:Make": "Canon",
            "EXIF:Model": "Canon EOS 5D Mark IV",
            "EXIF:LensModel": "EF24-70mm f/2.8L II USM",
            "EXIF:ISO": 100,
            "EXIF:FNumber": 2.8,
            "EXIF:ExposureTime": 0.004,
            "EXIF:FocalLength": 35.0,
        })

        assert camera.make == "Canon"
        assert camera.model == "Canon EOS 5D Mark IV"
        assert camera.lens_model == "EF24-70mm f/2.8L II USM"
        assert camera.settings == "ISO 100, f/2.8, 1/250s, 35mm"

    def test_long_exposure(self):
        assert format_exposure(2) == "2.0s"

    def test_model_only(self):
        camera = extract_camera({"EXIF:Model": "iPhone 14"})

        assert camera.make == ""
        assert camera.settings is None
        assert camera.display_name == "iPhone 14"

    def test_none(self):
        assert extract_camera({"EXIF:ISO": 100}) is None


class TestMetadataFromTags:
    """Tests for metadata_from_tags() and fallbacks."""

    def test_builds_metadata(self, temp_dir):
        path = make_file(temp_dir, "IMG_0001.jpg")

        metadata = metadata_from_tags(path, {
            "EXIF:DateTimeOriginal": "2023:06:15 14:30:00",
            "Composite:GPSLatitude": 48.8584,
            "Composite:GPSLongitude": 2.2945,
            "EXIF:Make": "Nikon",
            "EXIF:Model": "D750",
        })

        assert metadata.original_filename == "IMG_0001.jpg"
        assert metadata.date_taken == datetime(2023, 6, 15, 14, 30)
        assert metadata.has_location()
        assert metadata.has_camera()
        assert metadata.extraction_error is None

    def test_date_falls_back_to_file_date(self, temp_dir):
        path = make_file(temp_dir, "IMG_0001.jpg")
        os.utime(path, (1600000000, 1600000000))

        metadata = metadata_from_tags(path, {})

        assert metadata.date_taken is not None
        assert metadata.date_taken <= datetime.fromtimestamp(1600000000)
        assert not metadata.has_location()
        assert not metadata.has_camera()

    def test_file_date_missing_file(self, temp_dir):
        assert file_date(os.path.join(temp_dir, "nope.jpg")) is None

    def test_fallback_metadata(self, temp_dir):
        path = make_file(temp_dir, "IMG_0001.jpg")

        metadata = fallback_metadata(path, "corrupt header")

        assert metadata.additional_properties[EXTRACTION_ERROR_KEY] == "corrupt header"
        assert metadata.extraction_error == "corrupt header"
        assert metadata.date_taken is not None


class TestMetadataReader:
    """Tests for MetadataReader class."""

    @pytest.fixture
    def exiftool(self):
        manager = MagicMock()
        manager.is_running = True
        manager.error = None
        return manager

    def test_extract(self, temp_dir, exiftool):
        path = make_file(temp_dir, "a.jpg")
        exiftool.read_tags.return_value = {"EXIF:DateTimeOriginal": "2023:06:15 14:30:00"}

        metadata = MetadataReader(exiftool).extract(path)

        assert metadata.date_taken == datetime(2023, 6, 15, 14, 30)

    def test_extract_error_never_raises(self, temp_dir, exiftool):
        path = make_file(temp_dir, "a.jpg")
        exiftool.read_tags.side_effect = ValueError("truncated file")

        metadata = MetadataReader(exiftool).extract(path)

        assert metadata.extraction_error == "truncated file"
        assert metadata.date_taken is not None

    def test_unavailable_exiftool(self, temp_dir, exiftool):
        path = make_file(temp_dir, "a.jpg")
        exiftool.is_running = False
        exiftool.error = "ExifTool executable not found"

        metadata = MetadataReader(exiftool).extract(path)

        assert metadata.extraction_error == "ExifTool executable not found"

    def test_extract_batch_keeps_order(self, temp_dir, exiftool):
        paths = [make_file(temp_dir, "a.jpg"), make_file(temp_dir, "b.jpg")]
        exiftool.read_tags_batch.return_value = [
            {"EXIF:Model": "A"},
            {"EXIF:Model": "B"},
        ]

        results = MetadataReader(exiftool).extract_batch(paths)

        assert [m.original_filename for m in results] == ["a.jpg", "b.jpg"]
        assert [m.camera.model for m in results] == ["A", "B"]

    def test_does_not_stop_shared_exiftool(self, exiftool):
        reader = MetadataReader(exiftool)
        reader.stop()

        exiftool.stop.assert_not_called()

    def test_is_supported(self):
        reader = MetadataReader(MagicMock())

        assert reader.is_supported("a.HEIC")
        assert not reader.is_supported("a.txt")
