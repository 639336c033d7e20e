"""
Tests for IN/OUT classification and action center tracking.
"""

import numpy as np
import pytest

from algorithms.action import (
    ActionCenter,
    calculate_action_center,
    crop_around_action_center,
    crop_window,
    smooth_action_center,
)
from algorithms.classify import classify_detections, is_in_region, is_likely_ref, median_height
from models.detection import BoundingBox, ClassifiedDetection, Detection
from models.region import TrackingRegion

REGION = TrackingRegion(min_x=0.2, max_x=0.8, min_y=0.1, max_y=0.6)


def _centered(x, y, w=0.1, h=0.2):
    return Detection.from_bounds(x - w / 2, y - h / 2, x + w / 2, y + h / 2)


class TestIsInRegion:
    def test_center_inside(self):
        assert is_in_region(_centered(0.5, 0.3), REGION)

    def test_center_outside(self):
        assert not is_in_region(_centered(0.9, 0.3), REGION)

    def test_center_on_edge_is_inside(self):
        region = TrackingRegion(min_x=0.25, max_x=0.75, min_y=0.25, max_y=0.75)

        # centers at (0.25, 0.5) and (0.5, 0.75)
        assert is_in_region(Detection.from_bounds(0.125, 0.375, 0.375, 0.625), region)
        assert is_in_region(Detection.from_bounds(0.375, 0.5, 0.625, 1.0), region)
        assert not is_in_region(Detection.from_bounds(0.5, 0.375, 1.0625, 0.625), region)

    def test_box_overlapping_region_but_center_outside(self):
        """Only the center counts, not overlap."""
        det = Detection.from_bounds(0.7, 0.3, 0.95, 0.5)
        assert not is_in_region(det, REGION)


class TestClassifyDetections:
    def test_empty(self):
        assert classify_detections([], REGION) == []

    def test_in_and_out(self):
        people = classify_detections([_centered(0.5, 0.3), _centered(0.05, 0.3)], REGION)

        assert [p.in_region for p in people] == [True, False]
        assert [p.label for p in people] == ["PLAYER", "BENCH"]

    def test_tall_subject_flagged(self):
        detections = [
            _centered(0.3, 0.3, h=0.2),
            _centered(0.4, 0.3, h=0.2),
            _centered(0.5, 0.3, h=0.26),
            _centered(0.95, 0.5, h=0.3),
        ]

        people = classify_detections(detections, REGION)

        # median height is the upper-middle value, 0.26; 0.26 * 1.25 = 0.325
        assert [p.is_likely_adult for p in people] == [False, False, False, False]

        detections.append(_centered(0.6, 0.3, h=0.4))
        people = classify_detections(detections, REGION)
        assert people[-1].is_likely_adult
        assert people[-1].label == "ADULT?"

    def test_tall_subject_outside_is_coach(self):
        detections = [_centered(0.3, 0.3, h=0.1), _centered(0.4, 0.3, h=0.1), _centered(0.95, 0.4, h=0.3)]

        people = classify_detections(detections, REGION)

        assert people[2].label == "COACH"

    def test_median_height_default(self):
        assert median_height([]) == 0.2


def _striped_frame(light=(255, 255, 255), dark=(0, 0, 0), stripe=10):
    """200x100 frame with horizontal stripes every `stripe` rows."""
    frame = np.zeros((200, 100, 3), dtype=np.uint8)
    rows = (np.arange(200) // stripe) % 2 == 0
    frame[rows] = light
    frame[~rows] = dark
    return frame


FULL_HEIGHT = BoundingBox(min_x=0.25, min_y=0.0, max_x=0.75, max_y=1.0)


class TestIsLikelyRef:
    def test_black_and_white_stripes(self):
        assert is_likely_ref(_striped_frame(), FULL_HEIGHT)

    def test_plain_shirt(self):
        frame = np.full((200, 100, 3), 128, dtype=np.uint8)

        assert not is_likely_ref(frame, FULL_HEIGHT)

    def test_colored_stripes_ignored(self):
        """Red and blue stripes are saturated, so they never count as flips."""
        frame = _striped_frame(light=(0, 0, 255), dark=(255, 0, 0))

        assert not is_likely_ref(frame, FULL_HEIGHT)

    def test_small_box_skipped(self):
        box = BoundingBox(min_x=0.25, min_y=0.0, max_x=0.75, max_y=0.1)

        assert not is_likely_ref(_striped_frame(stripe=1), box)

    def test_only_torso_is_sampled(self):
        """Stripes below the torso band (rows 140+) are not looked at."""
        frame = _striped_frame()
        frame[:140] = 0

        assert not is_likely_ref(frame, FULL_HEIGHT)

    def test_classify_sets_ref_label(self):
        detections = [Detection(bbox=FULL_HEIGHT), _centered(0.5, 0.3)]

        people = classify_detections(detections, REGION, frame=_striped_frame())

        assert people[0].is_likely_ref
        assert people[0].label == "REF"

    def test_no_frame_no_ref_check(self):
        people = classify_detections([Detection(bbox=FULL_HEIGHT)], REGION)

        assert not people[0].is_likely_ref


class TestActionCenter:
    def _classified(self, x, y, w, h, in_region=True, ref=False):
        return ClassifiedDetection(detection=_centered(x, y, w, h), in_region=in_region, is_likely_ref=ref)

    def test_fallback_without_subjects(self):
        fallback = ActionCenter(0.3, 0.4)

        assert calculate_action_center([], fallback) == fallback

    def test_ignores_out_of_region(self):
        people = [self._classified(0.9, 0.9, 0.1, 0.1, in_region=False)]

        assert calculate_action_center(people) == ActionCenter(0.5, 0.5)

    def test_referee_counts_outside_region(self):
        people = [
            self._classified(0.2, 0.5, 0.1, 0.1),
            self._classified(0.8, 0.5, 0.1, 0.1, in_region=False, ref=True),
            self._classified(0.9, 0.9, 0.1, 0.1, in_region=False),
        ]

        center = calculate_action_center(people)

        assert center.x == pytest.approx(0.5)
        assert center.y == pytest.approx(0.5)

    def test_area_weighted(self):
        people = [
            self._classified(0.2, 0.5, 0.2, 0.2),  # area 0.04
            self._classified(0.8, 0.5, 0.1, 0.1),  # area 0.01
        ]

        center = calculate_action_center(people)

        assert center.x == pytest.approx((0.2 * 0.04 + 0.8 * 0.01) / 0.05)
        assert center.y == pytest.approx(0.5)

    def test_smoothing(self):
        center = smooth_action_center(ActionCenter(0.5, 0.5), ActionCenter(1.0, 0.0), smoothing=0.2)

        assert center.x == pytest.approx(0.6)
        assert center.y == pytest.approx(0.4)


class TestCrop:
    def test_window_centered(self):
        assert crop_window(200, 100, ActionCenter(0.5, 0.5), 2.0) == (50, 25, 150, 75)

    def test_window_shifted_inside_frame(self):
        x1, y1, x2, y2 = crop_window(200, 100, ActionCenter(0.0, 1.0), 2.0)

        assert (x1, y1) == (0, 0)
        assert (x2, y2) == (100, 50)

    def test_bottom_left_origin(self):
        """y=0 is the bottom of the frame, so the window lands at the last rows."""
        _, y1, _, y2 = crop_window(200, 100, ActionCenter(0.5, 0.0), 2.0)

        assert (y1, y2) == (50, 100)

    def test_crop_shape(self):
        frame = np.zeros((100, 200, 3), dtype=np.uint8)

        assert crop_around_action_center(frame, ActionCenter(), 2.0).shape == (50, 100, 3)

    def test_zoom_below_one_rejected(self):
        frame = np.zeros((100, 200, 3), dtype=np.uint8)

        with pytest.raises(ValueError):
            crop_around_action_center(frame, ActionCenter(), 0.5)
