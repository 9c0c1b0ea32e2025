from __future__ import annotations

import math

from ..bsdf import ColorValue, SpectralDistribution


def lambertian_percentages(lambertian: ColorValue) -> tuple[float, float, float]:
    """
    Diffuse baseline as CIE XYZ percentages. X and Z are reported as 0 when
    the chromaticity cannot be inverted (zero luminance).
    """
    return tuple(100.0 * x for x in lambertian.to_xyz())


def peak_angle(min_proj_sa: float) -> float:
    """
    Angular spread [deg] reported for the smallest resolved peak of a
    distribution, from its projected solid angle [sr].
    """
    return math.sqrt(min_proj_sa / math.pi) * (360.0 / math.pi)


def summarize_hemisphere(
    label: str, lambertian: ColorValue, distribution: SpectralDistribution | None
) -> str:
    """
    Format the report line of one hemisphere: diffuse XYZ percentages, then
    the peak hemispherical integral and the angular spread of the narrowest
    peak (0% and 180 for purely diffuse hemispheres).
    """
    x, y, z = lambertian_percentages(lambertian)
    line = f"{label}\t{x:4.1f} {y:4.1f} {z:4.1f}\t\t"

    if distribution is None:
        return line + "0%\t\t180"

    return (
        line
        + f"{100.0 * distribution.max_hemi:5.1f}%\t\t"
        + f"{peak_angle(distribution.min_proj_sa):.2f} deg"
    )
