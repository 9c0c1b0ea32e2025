"""Frame and direction manipulation utilities."""

from __future__ import annotations

import numpy as np

from .typing import DirectionLike


def normalize(v: DirectionLike) -> np.ndarray:
    """
    Normalize a 3-vector.

    Parameters
    ----------
    v : array-like
        Vector to normalize.

    Returns
    -------
    ndarray
        Unit vector with the same orientation as ``v``.

    Raises
    ------
    ValueError
        If ``v`` is not a finite, non-zero 3-vector.
    """
    v = np.asarray(v, dtype=float)

    if v.shape != (3,):
        raise ValueError(f"expected a 3-vector, got an array of shape {v.shape}")

    norm = np.linalg.norm(v)
    if not np.isfinite(norm) or norm == 0.0:
        raise ValueError(f"cannot normalize vector {v}")

    return v / norm


def side_of(v: DirectionLike) -> int:
    """
    Return the side of the surface a direction points to: +1 for the front
    (+z) side, -1 for the back side and 0 for grazing directions.
    """
    z = float(np.asarray(v, dtype=float)[2])
    return int(np.sign(z))


def angles_to_direction(
    theta: float, phi: float, side: int = 1
) -> np.ndarray:
    """
    Convert a zenith and azimuth angle pair to a direction unit vector.

    Parameters
    ----------
    theta : float
        Zenith angle measured from the surface normal on the requested side
        [rad].

    phi : float
        Azimuth angle, counted counter-clockwise from the +x axis [rad].

    side : {1, -1}, optional, default: 1
        Side of the surface the direction points to.

    Returns
    -------
    ndarray
        Direction unit vector.
    """
    sin_theta = np.sin(theta)
    return np.array(
        [sin_theta * np.cos(phi), sin_theta * np.sin(phi), side * np.cos(theta)]
    )


def direction_to_angles(v: DirectionLike) -> tuple[float, float]:
    """
    Convert a direction to a (zenith, azimuth) pair, the zenith angle being
    measured from the normal on the side ``v`` points to.

    Parameters
    ----------
    v : array-like
        Direction vector. Does not have to be normalized.

    Returns
    -------
    theta : float
        Zenith angle in [0, π/2] [rad].

    phi : float
        Azimuth angle in [0, 2π[ [rad].
    """
    v = normalize(v)
    theta = float(np.arccos(np.clip(abs(v[2]), 0.0, 1.0)))
    phi = float(np.arctan2(v[1], v[0])) % (2.0 * np.pi)
    return theta, phi


def disk_to_square(x: float, y: float) -> tuple[float, float]:
    """
    Map a point of the unit disk to the unit square with the Shirley–Chiu
    concentric mapping. The mapping preserves areas, so that the projected
    solid angle of a square cell is π times its area.

    Parameters
    ----------
    x, y : float
        Coordinates on the unit disk.

    Returns
    -------
    tuple of float
        Coordinates in [0, 1]².
    """
    r = np.hypot(x, y)
    phi = np.arctan2(y, x)

    if phi < -0.25 * np.pi:
        phi += 2.0 * np.pi

    if phi < 0.25 * np.pi:
        a = r
        b = phi * a * (4.0 / np.pi)
    elif phi < 0.75 * np.pi:
        b = r
        a = -(phi - 0.5 * np.pi) * b * (4.0 / np.pi)
    elif phi < 1.25 * np.pi:
        a = -r
        b = (phi - np.pi) * a * (4.0 / np.pi)
    else:
        b = -r
        a = (phi - 1.5 * np.pi) * b * (4.0 / np.pi)

    return 0.5 * a + 0.5, 0.5 * b + 0.5
