"""Unit tests for utils/ (colors, coordinates, validation, performance) and config/settings.py."""
from __future__ import annotations

import pytest

from config.settings import Settings, get_settings
from document.errors import InputMissing, InvalidParameter, PageIndexOutOfRange
from document.models import Rect
from utils.colors import parse_color
from utils.coordinates import from_fitz_rect, rect_within, to_fitz_point, to_fitz_rect
from utils.performance import clear_timings, get_timings, summarize_timings, track_time
from utils.validation import (
    distinct_sorted,
    validate_page_index,
    validate_page_indices,
    validate_permutation,
    validate_rotation,
)


class TestParseColor:

    def test_string_channels_are_normalized(self):
        assert parse_color("255,0,51") == pytest.approx((1.0, 0.0, 0.2))

    def test_tuple_channels(self):
        assert parse_color((0, 255, 0)) == pytest.approx((0.0, 1.0, 0.0))

    def test_none_uses_default(self):
        assert parse_color(None, default=(0.5, 0.5, 0.5)) == (0.5, 0.5, 0.5)

    @pytest.mark.parametrize("value", ["1,2", "a,b,c", "0,0,256", (-1, 0, 0), (1, 2, 3, 4)])
    def test_malformed_rejected(self, value):
        with pytest.raises(InvalidParameter):
            parse_color(value)


class TestCoordinates:

    def test_point_flips_y(self):
        assert to_fitz_point(50, 50, 842) == (50, 792)

    def test_rect_flips_and_back(self):
        rect = Rect(10, 20, 100, 50)
        bbox = to_fitz_rect(rect, 800)
        assert bbox == (10, 730, 110, 780)
        assert from_fitz_rect(bbox, 800) == rect

    def test_rect_within(self):
        assert rect_within(Rect(0, 0, 100, 100), 100, 100)
        assert not rect_within(Rect(50, 50, 100, 10), 100, 100)

    def test_rect_rejects_non_positive_size(self):
        with pytest.raises(InvalidParameter):
            Rect(0, 0, 0, 10)


class TestValidation:

    def test_page_index_bounds(self):
        assert validate_page_index(0, 1) == 0
        with pytest.raises(PageIndexOutOfRange):
            validate_page_index(1, 1)
        with pytest.raises(PageIndexOutOfRange):
            validate_page_index(-1, 3)

    @pytest.mark.parametrize("value", [True, 1.0, "1"])
    def test_page_index_must_be_int(self, value):
        with pytest.raises(InvalidParameter):
            validate_page_index(value, 5)

    def test_page_indices_keep_order(self):
        assert validate_page_indices([3, 1, 3], 4) == [3, 1, 3]
        with pytest.raises(InputMissing):
            validate_page_indices([], 4)

    def test_distinct_sorted(self):
        assert distinct_sorted([3, 1, 1, 2]) == [1, 2, 3]

    def test_permutation(self):
        assert validate_permutation([2, 0, 1], 3) == [2, 0, 1]
        with pytest.raises(InvalidParameter):
            validate_permutation([0, 1], 3)
        with pytest.raises(InvalidParameter):
            validate_permutation([0, 0, 1], 3)
        with pytest.raises(PageIndexOutOfRange):
            validate_permutation([0, 1, 3], 3)

    @pytest.mark.parametrize("degrees", [0, 90, -90, 180, 270, 450])
    def test_rotation_multiples_of_90(self, degrees):
        assert validate_rotation(degrees) == degrees

    @pytest.mark.parametrize("degrees", [45, 91, 90.0])
    def test_rotation_rejected(self, degrees):
        with pytest.raises(InvalidParameter):
            validate_rotation(degrees)


def test_settings_defaults():
    s = Settings()
    assert s.blank_page_min_chars == 10
    assert s.diff_report_cap == 100
    assert s.ocr_candidate_languages[:4] == ["eng", "spa", "fra", "deu"]
    assert get_settings() is get_settings()


def test_track_time_records_and_summarizes():
    clear_timings()
    with track_time("step", pages=2):
        pass
    with track_time("step"):
        pass
    timings = get_timings()
    assert [t.name for t in timings] == ["step", "step"]
    assert timings[0].metadata == {"pages": 2}
    assert set(summarize_timings()) == {"step"}
    clear_timings()
