"""Tests for photorenamer.core.suggestions module."""

from datetime import datetime

import pytest

from photorenamer.core.models import CameraInfo, GpsCoordinates, LocationInfo, NamingPattern, PhotoMetadata
from photorenamer.core.patterns import get_pattern
from photorenamer.core.suggestions import SuggestionEngine, simplify_camera_name

from conftest import FakeGeocoder


class TestSimplifyCameraName:
    """Tests for simplify_camera_name()."""

    def test_removes_non_alphanumeric(self):
        assert simplify_camera_name("Canon EOS 5D Mark IV") == "CanonEOS5DMarkIV"

    def test_removes_digital_camera(self):
        assert simplify_camera_name("COOLPIX P900 DIGITAL CAMERA") == "COOLPIXP900"
        assert simplify_camera_name("FinePix X100 Digital Camera") == "FinePixX100"

    def test_truncates_to_20(self):
        assert simplify_camera_name("ILCE-7RM4A Alpha Seven Mark Four") == "ILCE7RM4AAlphaSevenM"

    @pytest.mark.parametrize("model", [None, "", "  ", "---"])
    def test_fallback(self, model):
        assert simplify_camera_name(model) == "Camera"


class TestBuildFilename:
    """Tests for token substitution."""

    def test_date_time(self, full_metadata):
        engine = SuggestionEngine()

        assert engine.build_filename(full_metadata, get_pattern("date_time")) == "2023-06-15_14-30"

    def test_missing_date(self, empty_metadata):
        engine = SuggestionEngine()

        assert engine.build_filename(empty_metadata, get_pattern("date_time")) == "Unknown_00-00"

    def test_all_tokens_fall_back(self, empty_metadata):
        engine = SuggestionEngine()

        result = engine.build_filename(empty_metadata, get_pattern("full"))

        assert result == "Unknown_00-00_Unknown_Camera"

    def test_custom_fallback(self, full_metadata):
        engine = SuggestionEngine()

        assert engine.build_filename(full_metadata, get_pattern("date_custom")) == "2023-06-15_Custom"
        assert engine.build_filename(full_metadata, get_pattern("date_custom"), "  ") == "2023-06-15_Custom"

    def test_custom_tag(self, full_metadata):
        engine = SuggestionEngine()

        result = engine.build_filename(full_metadata, get_pattern("date_custom"), " Holiday ")

        assert result == "2023-06-15_Holiday"

    def test_location_without_geocoder(self, full_metadata):
        engine = SuggestionEngine()

        assert engine.build_filename(full_metadata, get_pattern("date_location")) == "2023-06-15_Unknown"

    def test_location_from_geocoder(self, full_metadata):
        geocoder = FakeGeocoder(LocationInfo(city="Paris", country="France"))
        engine = SuggestionEngine(geocoder)

        result = engine.build_filename(full_metadata, get_pattern("date_location_time"))

        assert result == "2023-06-15_Paris_14-30"
        assert geocoder.calls == [(48.8584, 2.2945)]

    def test_location_lookup_error(self, full_metadata):
        engine = SuggestionEngine(FakeGeocoder(error=RuntimeError("offline")))

        assert engine.build_filename(full_metadata, get_pattern("date_location")) == "2023-06-15_Unknown"

    def test_location_lookup_none(self, full_metadata):
        engine = SuggestionEngine(FakeGeocoder(info=None))

        assert engine.build_filename(full_metadata, get_pattern("date_location")) == "2023-06-15_Unknown"

    def test_no_gps_skips_geocoder(self, empty_metadata):
        geocoder = FakeGeocoder(LocationInfo(city="Paris"))
        engine = SuggestionEngine(geocoder)

        engine.build_filename(empty_metadata, get_pattern("date_location"))

        assert geocoder.calls == []


class TestGenerateForPattern:
    """Tests for SuggestionEngine.generate_for_pattern()."""

    def test_single_sanitized_suggestion(self, full_metadata):
        engine = SuggestionEngine(FakeGeocoder(LocationInfo(city="Saint-Denis / Nord")))

        suggestions = engine.generate_for_pattern(full_metadata, get_pattern("date_location"))

        assert len(suggestions) == 1
        assert suggestions[0].suggested_name == "2023-06-15_Saint-Denis_Nord"
        assert suggestions[0].pattern == "date_location"
        assert suggestions[0].pattern_description == "YYYY-MM-DD_CityName"
        assert suggestions[0].has_conflict is False
        assert suggestions[0].conflict_reason is None

    def test_custom_tag_sanitized(self, full_metadata):
        engine = SuggestionEngine()

        suggestions = engine.generate_for_pattern(full_metadata, get_pattern("date_custom"), "Mom's B-day?")

        assert suggestions[0].suggested_name == "2023-06-15_Mom's_B-day"

    def test_ignores_requirements(self, empty_metadata):
        engine = SuggestionEngine()

        suggestions = engine.generate_for_pattern(empty_metadata, get_pattern("date_camera"))

        assert suggestions[0].suggested_name == "Unknown_Camera"

    def test_empty_template_still_named(self, full_metadata):
        pattern = NamingPattern(id="blank", name="Blank", template="", description="")

        suggestions = SuggestionEngine().generate_for_pattern(full_metadata, pattern)

        assert [s.suggested_name for s in suggestions] == ["unnamed"]


class TestGenerateAllApplicable:
    """Tests for SuggestionEngine.generate_all_applicable()."""

    def test_full_metadata_gives_every_pattern(self, full_metadata):
        engine = SuggestionEngine(FakeGeocoder(LocationInfo(city="Paris")))

        suggestions = engine.generate_all_applicable(full_metadata)

        assert [s.pattern for s in suggestions] == [
            "date_time", "date_only", "date_location", "date_location_time",
            "date_camera", "date_custom", "date_location_custom", "full",
        ]
        assert suggestions[-1].suggested_name == "2023-06-15_14-30_Paris_CanonEOS5DMarkIV"

    def test_skips_location_patterns_without_gps(self):
        metadata = PhotoMetadata(
            original_filename="a.jpg",
            date_taken=datetime(2023, 6, 15, 14, 30),
            camera=CameraInfo(make="Nikon", model="D750"),
        )

        patterns = [s.pattern for s in SuggestionEngine().generate_all_applicable(metadata)]

        assert patterns == ["date_time", "date_only", "date_camera", "date_custom"]

    def test_skips_camera_patterns_without_camera(self):
        metadata = PhotoMetadata(
            original_filename="a.jpg",
            date_taken=datetime(2023, 6, 15, 14, 30),
            location=GpsCoordinates(1.0, 2.0),
        )

        patterns = [s.pattern for s in SuggestionEngine().generate_all_applicable(metadata)]

        assert "date_camera" not in patterns
        assert "full" not in patterns
        assert "date_location" in patterns

    def test_empty_metadata(self, empty_metadata):
        suggestions = SuggestionEngine().generate_all_applicable(empty_metadata)

        assert [s.suggested_name for s in suggestions] == [
            "Unknown_00-00", "Unknown", "Unknown_Custom",
        ]

    def test_available_patterns(self):
        assert len(SuggestionEngine().get_available_patterns()) == 8
