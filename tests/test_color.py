import pytest

from raykit.color import heatmap, luma
from raykit.util import Vec3


def test_luma_of_white_is_one():
    assert luma(Vec3(1.0, 1.0, 1.0)) == pytest.approx(1.0)


def test_luma_green_weight():
    assert luma(Vec3(0.0, 1.0, 0.0)) == pytest.approx(0.715160)


def test_luma_is_linear():
    a = Vec3(0.2, 0.5, 0.1)
    assert luma(a * 2) == pytest.approx(2 * luma(a))


def test_heatmap_zero_is_black():
    assert heatmap(0.0) == Vec3(0.0, 0.0, 0.0)
    assert heatmap(-1.0) == Vec3(0.0, 0.0, 0.0)


def test_heatmap_one_is_red():
    c = heatmap(1.0)
    assert c.x == pytest.approx(1.0)
    assert c.y == pytest.approx(0.0)
    assert c.z == pytest.approx(0.0)


def test_heatmap_clamps_above_one():
    assert heatmap(2.0) == heatmap(1.0)


@pytest.mark.parametrize("val", [0.01, 0.25, 0.5, 0.75, 0.99])
def test_heatmap_channels_in_range(val):
    c = heatmap(val)
    assert all(0.0 <= ch <= 1.0 for ch in c)
    assert max(c) == pytest.approx(1.0)


def test_heatmap_low_values_are_bluish():
    c = heatmap(0.01)
    assert c.z > c.x