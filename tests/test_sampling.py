import math

import pytest

from raykit.sampling import (
    cosine_hemisphere_pdf,
    cosine_sample_hemisphere,
    uniform_hemisphere_pdf,
    uniform_sample_disk,
    uniform_sample_hemisphere,
    uniform_sample_triangle,
)

SAMPLES = [(u, v) for u in (0.0, 0.1, 0.37, 0.5, 0.83, 0.999) for v in (0.0, 0.2, 0.55, 0.9)]


@pytest.mark.parametrize("sample", SAMPLES)
def test_disk_radius_squared_equals_first_sample(sample):
    x, y = uniform_sample_disk(sample)
    assert x * x + y * y == pytest.approx(sample[0], abs=1e-12)


@pytest.mark.parametrize("sample", SAMPLES)
def test_uniform_hemisphere_unit_and_elevation(sample):
    d = uniform_sample_hemisphere(sample)
    assert d.length() == pytest.approx(1.0)
    assert d.z == sample[0]


def test_uniform_hemisphere_pdf():
    assert uniform_hemisphere_pdf() == pytest.approx(1.0 / (2.0 * math.pi))


@pytest.mark.parametrize("sample", SAMPLES)
def test_cosine_hemisphere_unit_upper(sample):
    d = cosine_sample_hemisphere(sample)
    assert d.length() == pytest.approx(1.0)
    assert d.z >= 0.0


def test_cosine_pdf_relation():
    assert cosine_hemisphere_pdf(1.0) == pytest.approx(1.0 / math.pi)
    assert cosine_hemisphere_pdf(0.5) == pytest.approx(cosine_hemisphere_pdf(1.0) / 2)


@pytest.mark.parametrize("sample", SAMPLES)
def test_triangle_barycentrics_valid(sample):
    beta, gamma = uniform_sample_triangle(sample)
    assert beta >= 0.0 and gamma >= 0.0
    assert beta + gamma <= 1.0 + 1e-12


def test_triangle_zero_sample_is_first_corner_opposite():
    assert uniform_sample_triangle((0.0, 0.7)) == (1.0, 0.0)