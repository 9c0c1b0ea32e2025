import numpy as np
import pytest

from bsdfcheck.bsdf import (
    DISTRIBUTION_PRIORITY,
    ColorValue,
    Hemisphere,
    LoadedBSDF,
    Side,
)
from bsdfcheck.test_tools import make_grid_bsdf, make_lambertian_bsdf


def test_color_value_xyz():
    c = ColorValue(0.2, 0.3, 0.3)
    x, y, z = c.to_xyz()
    assert np.isclose(x, 0.2)
    assert np.isclose(y, 0.2)
    assert np.isclose(z, 0.2 * 0.4 / 0.3)

    # Round trip through XYZ
    c2 = ColorValue.from_xyz(x, y, z)
    assert np.isclose(c2.cx, 0.3)
    assert np.isclose(c2.cy, 0.3)

    # Degenerate chromaticity only carries luminance
    assert ColorValue(0.5, 0.3, 0.0).to_xyz() == (0.0, 0.5, 0.0)
    assert ColorValue.zero().to_xyz() == (0.0, 0.0, 0.0)


def test_color_value_arithmetic():
    a = ColorValue(0.2)
    b = ColorValue(0.3)
    assert np.isclose((a + b).cie_y, 0.5)
    assert np.isclose((a + b).cx, 1.0 / 3.0)

    # Adding zero leaves the value unchanged
    assert a + ColorValue.zero() == a
    assert ColorValue.zero() + a == a

    assert np.isclose(a.scaled(2.0).cie_y, 0.4)


def test_hemisphere():
    assert Hemisphere.FRONT_TRANSMISSION.in_side is Side.FRONT
    assert Hemisphere.FRONT_TRANSMISSION.out_side is Side.BACK
    assert Hemisphere.BACK_REFLECTION.is_reflection
    assert not Hemisphere.BACK_TRANSMISSION.is_reflection

    assert Hemisphere.from_sides(-1, 1) is Hemisphere.BACK_TRANSMISSION
    with pytest.raises(ValueError, match="invalid side pair"):
        Hemisphere.from_sides(0, 1)

    assert (
        Hemisphere.from_directions(np.array([0, 0, 1]), np.array([0, 0, -1]))
        is Hemisphere.FRONT_TRANSMISSION
    )
    with pytest.raises(ValueError, match="surface plane"):
        Hemisphere.from_directions(np.array([1, 0, 0]), np.array([0, 0, 1]))

    assert DISTRIBUTION_PRIORITY[0] is Hemisphere.BACK_TRANSMISSION
    assert set(DISTRIBUTION_PRIORITY) == set(Hemisphere)


def test_loaded_bsdf_defaults():
    bsdf = LoadedBSDF("blinds.xml")
    assert bsdf.name == "blinds.xml"
    assert np.allclose(bsdf.dimensions.m_as("m"), 0.0)
    for hemisphere in Hemisphere:
        assert bsdf.distribution(hemisphere) is None
        assert bsdf.lambertian(hemisphere) == ColorValue.zero()
    assert bsdf.geometry is None
    assert not bsdf.released

    # Unitless dimensions are metres
    bsdf = LoadedBSDF(dimensions=[1.0, 2.0, 0.01])
    assert np.allclose(bsdf.dimensions.m_as("cm"), [100.0, 200.0, 1.0])


def test_loaded_bsdf_release():
    bsdf = make_grid_bsdf(geometry={"format": "MGF"})
    assert bsdf.front_reflection is not None

    with bsdf:
        pass

    assert bsdf.released
    assert bsdf.geometry is None
    for hemisphere in Hemisphere:
        assert bsdf.distribution(hemisphere) is None

    # Releasing twice is harmless
    bsdf.release()
    assert bsdf.released


def test_loaded_bsdf_lambertian():
    bsdf = make_lambertian_bsdf(0.4)
    assert bsdf.lambertian(Hemisphere.FRONT_REFLECTION).cie_y == 0.4
    assert bsdf.lambertian(Hemisphere.FRONT_TRANSMISSION).cie_y == 0.0

    bsdf.set_lambertian(Hemisphere.FRONT_TRANSMISSION, ColorValue(0.1))
    assert bsdf.front_transmission_lambertian.cie_y == 0.1
