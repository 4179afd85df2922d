"""Tests for the periodic box."""

import numpy as np
import pytest

from ljmd.errors import OutOfBoundsPosition
from ljmd.system import Box


class TestBox:
    """Test Box geometry."""

    def test_cubic_box(self):
        """Test cubic box creation."""
        box = Box.cubic(10.0)
        assert box.length == 10.0
        assert box.volume == pytest.approx(1000.0)

    def test_negative_length_raises(self):
        """Test that a negative edge length is rejected."""
        with pytest.raises(ValueError):
            Box(-1.0)

    def test_box_is_frozen(self):
        """Test that the box cannot be mutated."""
        box = Box(5.0)
        with pytest.raises(AttributeError):
            box.length = 6.0


class TestMinimumImage:
    """Test the minimum image convention."""

    def test_point_nine_l_resolves_to_point_one_l(self):
        """Test that a separation of 0.9 L is seen as 0.1 L."""
        box = Box(10.0)
        r1 = np.array([0.5, 0.5, 0.5])
        r2 = np.array([9.5, 0.5, 0.5])

        delta = box.minimum_image(r1 - r2)
        assert delta[0] == pytest.approx(1.0)
        assert box.minimum_image_distance(r1, r2) == pytest.approx(1.0)

    def test_sign_is_preserved(self):
        """Test that folding keeps the direction of the nearest image."""
        box = Box(10.0)
        delta = box.minimum_image([-9.0, 9.0, 4.0])
        np.testing.assert_allclose(delta, [1.0, -1.0, 4.0])

    def test_every_component_within_half_box(self):
        """Test that folded components never exceed L/2."""
        rng = np.random.default_rng(0)
        box = Box(7.0)
        a = rng.uniform(0, 7.0, (200, 3))
        b = rng.uniform(0, 7.0, (200, 3))

        delta = box.minimum_image(a - b)
        assert np.all(np.abs(delta) <= 3.5)

    def test_input_not_modified(self):
        """Test that minimum_image returns a new array."""
        box = Box(10.0)
        raw = np.array([9.0, 0.0, 0.0])
        box.minimum_image(raw)
        assert raw[0] == 9.0


class TestWrap:
    """Test wrapping positions into the box."""

    def test_wrap_in_place(self):
        """Test that out-of-box coordinates get one periodic shift."""
        box = Box(10.0)
        positions = np.array([[-0.5, 10.0, 10.5], [5.0, 5.0, 5.0]])

        box.wrap(positions)

        np.testing.assert_allclose(positions[0], [9.5, 0.0, 0.5])
        np.testing.assert_allclose(positions[1], [5.0, 5.0, 5.0])

    def test_wrap_result_in_half_open_range(self):
        """Test that wrapped coordinates lie in [0, L)."""
        rng = np.random.default_rng(1)
        box = Box(4.0)
        positions = rng.uniform(-3.9, 7.9, (500, 3))

        box.wrap(positions)

        assert np.all(positions >= 0.0)
        assert np.all(positions < 4.0)

    def test_far_outside_raises(self):
        """Test that a jump of more than one box length is reported."""
        box = Box(10.0)
        positions = np.array([[1.0, 1.0, 1.0], [25.0, 1.0, 1.0]])

        with pytest.raises(OutOfBoundsPosition) as excinfo:
            box.wrap(positions)
        assert excinfo.value.indices == [1]

    def test_nan_is_outside(self):
        """Test that non-finite positions are reported."""
        box = Box(10.0)
        with pytest.raises(OutOfBoundsPosition):
            box.check_inside(np.array([[np.nan, 1.0, 1.0]]))
