import numpy as np
import pytest

from bsdfcheck.frame import (
    angles_to_direction,
    direction_to_angles,
    disk_to_square,
    normalize,
    side_of,
)


def test_normalize():
    np.testing.assert_allclose(normalize([0, 0, 2]), [0, 0, 1])
    np.testing.assert_allclose(normalize([3, 0, 4]), [0.6, 0, 0.8])

    with pytest.raises(ValueError, match="3-vector"):
        normalize([1, 0])

    with pytest.raises(ValueError, match="cannot normalize"):
        normalize([0, 0, 0])

    with pytest.raises(ValueError, match="cannot normalize"):
        normalize([np.nan, 0, 1])


def test_side_of():
    assert side_of([0, 0, 1]) == 1
    assert side_of([0.5, 0, -0.1]) == -1
    assert side_of([1, 0, 0]) == 0


@pytest.mark.parametrize("side", [1, -1])
@pytest.mark.parametrize(
    "theta, phi",
    [(0.0, 0.0), (np.pi / 6, np.pi / 3), (np.pi / 3, 1.5 * np.pi)],
)
def test_angles_direction_conversion(theta, phi, side):
    v = angles_to_direction(theta, phi, side)
    assert np.isclose(np.linalg.norm(v), 1.0)
    assert np.sign(v[2]) == side

    theta_out, phi_out = direction_to_angles(v)
    assert np.isclose(theta_out, theta)
    if theta > 0.0:
        assert np.isclose(phi_out, phi)


def test_direction_to_angles_range():
    # Azimuth is wrapped to [0, 2π[
    _, phi = direction_to_angles([0, -1, 1])
    assert np.isclose(phi, 1.5 * np.pi)


@pytest.mark.parametrize(
    "disk, square",
    [
        ((0.0, 0.0), (0.5, 0.5)),
        ((1.0, 0.0), (1.0, 0.5)),
        ((0.0, 1.0), (0.5, 1.0)),
        ((-1.0, 0.0), (0.0, 0.5)),
        ((0.0, -1.0), (0.5, 0.0)),
    ],
)
def test_disk_to_square(disk, square):
    np.testing.assert_allclose(disk_to_square(*disk), square, atol=1e-12)


def test_disk_to_square_range():
    rng = np.random.default_rng(0)
    for r, phi in zip(rng.uniform(0, 1, 50), rng.uniform(0, 2 * np.pi, 50)):
        a, b = disk_to_square(r * np.cos(phi), r * np.sin(phi))
        assert 0.0 <= a <= 1.0
        assert 0.0 <= b <= 1.0
