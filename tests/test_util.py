import math

import pytest

from raykit.util import (
    Vec3,
    absdot,
    abs_cos_theta,
    align,
    bary_interpol,
    cdot,
    clamp,
    cos2_theta,
    float_as_int,
    flip_normal_to_ray,
    fresnel_dielectric,
    int_as_float,
    nextafter_toward,
    offset_ray_origin,
    refract,
    same_hemisphere,
    sin2_theta,
    sin_theta,
    tan2_theta,
    tan_theta,
    theta_z,
    to_cartesian,
    to_spherical,
)


def test_vec3_dot_and_length_agree():
    v = Vec3(1.0, 2.0, 3.0)
    assert v.length() ** 2 == pytest.approx(v.dot(v))


def test_vec3_arithmetic():
    a = Vec3(1.0, 2.0, 3.0)
    b = Vec3(4.0, 5.0, 6.0)
    assert (a + b) - b == a
    assert -a + a == Vec3()
    assert 2 * a == a * 2 == a + a
    assert (a * 2) / 2 == a
    assert a[2] == a.z


def test_cdot_clamps_negative():
    a = Vec3(1.0, 0.0, 0.0)
    assert cdot(a, -a) == 0.0
    assert cdot(a, a) == a.dot(a)


def test_absdot_is_symmetric_in_sign():
    a = Vec3(0.3, -0.2, 0.9)
    assert absdot(a, -a) == pytest.approx(a.dot(a))


def test_float_bits_round_trip():
    for f in (1.5, -2.25, 0.0, 1e-20):
        assert int_as_float(float_as_int(f)) == pytest.approx(f)
    assert float_as_int(1.0) == 0x3F800000


def test_nextafter_moves_one_ulp():
    v = Vec3(1.0, -2.0, 0.5)
    d = Vec3(1.0, 1.0, -1.0)
    r = nextafter_toward(v, d)
    assert r.x > v.x and r.y > v.y and r.z < v.z
    assert float_as_int(r.x) - float_as_int(v.x) == 1
    assert float_as_int(r.z) - float_as_int(v.z) == -1


def test_nextafter_from_zero():
    r = nextafter_toward(Vec3(0.0, 0.0, 0.0), Vec3(1.0, -1.0, 1.0))
    assert r.x > 0.0 and r.y < 0.0
    assert r.x == -r.y


def test_offset_near_origin_uses_float_scale():
    r = offset_ray_origin(Vec3(0.0, 0.0, 0.0), Vec3(0.0, 0.0, 1.0))
    assert r.z == 1.0 / 65536.0
    assert r.x == 0.0


def test_offset_far_from_origin_uses_integer_steps():
    p = Vec3(1.0, -1.0, 2.0)
    r = offset_ray_origin(p, Vec3(1.0, 1.0, 0.0))
    assert float_as_int(r.x) - float_as_int(p.x) == 256
    assert r.y > p.y
    assert r.z == p.z


def test_clamp():
    assert clamp(-1.0, 0.0, 1.0) == 0.0
    assert clamp(2.0, 0.0, 1.0) == 1.0
    assert clamp(0.25, 0.0, 1.0) == 0.25


def test_fresnel_matching_ior_is_zero():
    assert fresnel_dielectric(0.7, 1.3, 1.3) == pytest.approx(0.0)


def test_fresnel_total_internal_reflection():
    assert fresnel_dielectric(-0.1, 1.0, 1.5) == 1.0


def test_fresnel_normal_incidence_glass():
    assert fresnel_dielectric(1.0, 1.0, 1.5) == pytest.approx(0.04)


@pytest.mark.parametrize("cos_wi", [-0.9, -0.5, 0.1, 0.5, 0.99])
def test_fresnel_in_unit_range(cos_wi):
    assert 0.0 <= fresnel_dielectric(cos_wi, 1.0, 1.5) <= 1.0


def test_refract_normal_incidence_passes_straight():
    w_t = refract(Vec3(0.0, 0.0, 1.0), Vec3(0.0, 0.0, 1.0), 1.5)
    assert (w_t.x, w_t.y, w_t.z) == pytest.approx((0.0, 0.0, -1.0), abs=1e-9)


def test_refract_total_internal_reflection():
    w_i = Vec3(math.sqrt(0.99), 0.0, -0.1)
    assert refract(w_i, Vec3(0.0, 0.0, 1.0), 1.5) is None


def test_refract_preserves_unit_length():
    w_i = Vec3(0.6, 0.0, 0.8)
    w_t = refract(w_i, Vec3(0.0, 0.0, 1.0), 1.5)
    assert w_t.length() == pytest.approx(1.0)
    assert w_t.z < 0


@pytest.mark.parametrize("c", [-0.8, -0.3, 0.2, 0.6, 0.95])
def test_trig_identities(c):
    assert sin2_theta(c) + cos2_theta(c) == pytest.approx(1.0)
    assert sin_theta(c) ** 2 == pytest.approx(sin2_theta(c))
    assert tan_theta(c) ** 2 == pytest.approx(tan2_theta(c))
    assert abs_cos_theta(c) == abs(c)


def test_tan_at_grazing_is_infinite():
    assert tan_theta(0.0) == math.inf


def test_theta_z():
    assert theta_z(2.0) == 0.0
    assert theta_z(1.0) == 0.0
    assert theta_z(0.0) == pytest.approx(math.pi / 2)


def test_to_spherical_range():
    theta, phi = to_spherical(Vec3(0.0, 1.0, 0.0))
    assert theta == 0.0
    theta, phi = to_spherical(Vec3(0.0, 0.0, -1.0))
    assert 0.0 <= phi < 2 * math.pi
    assert 0.0 <= theta <= math.pi


def test_to_cartesian_pole():
    r = to_cartesian((0.0, 0.0))
    assert (r.x, r.y, r.z) == pytest.approx((0.0, 0.0, 1.0), abs=1e-9)


def test_to_cartesian_unit_length():
    assert to_cartesian((1.1, 2.3)).length() == pytest.approx(1.0)


@pytest.mark.parametrize(
    "axis",
    [Vec3(0.0, 0.0, 1.0), Vec3(0.0, 0.0, -1.0), Vec3(0.6, 0.0, 0.8), Vec3(0.0, 0.6, -0.8)],
)
def test_align_maps_z_onto_axis(axis):
    r = align(Vec3(0.0, 0.0, 1.0), axis)
    assert (r.x, r.y, r.z) == pytest.approx((axis.x, axis.y, axis.z), abs=1e-9)


def test_align_preserves_length():
    v = Vec3(0.3, 0.4, 0.5)
    r = align(v, Vec3(0.6, 0.0, 0.8))
    assert r.length() == pytest.approx(v.length())


def test_flip_normal_to_ray():
    n = Vec3(0.0, 0.0, 1.0)
    assert flip_normal_to_ray(n, Vec3(0.0, 0.0, 1.0)) == -n
    assert flip_normal_to_ray(n, Vec3(0.0, 0.0, -1.0)) == n
    assert same_hemisphere(n, Vec3(0.1, 0.0, 0.5))


def test_bary_interpol_corners():
    a, b, c = Vec3(1.0, 0.0, 0.0), Vec3(0.0, 1.0, 0.0), Vec3(0.0, 0.0, 1.0)
    assert bary_interpol(a, b, c, 0.0, 0.0) == a
    assert bary_interpol(a, b, c, 1.0, 0.0) == b
    assert bary_interpol(a, b, c, 0.0, 1.0) == c