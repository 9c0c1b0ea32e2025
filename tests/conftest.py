import numpy as np
import pytest

from bsdfcheck.bsdf import KLEMS_QUARTER, Hemisphere
from bsdfcheck.test_tools import symmetric_values, write_window_xml

# ------------------------------------------------------------------------------
#                                   Fixtures
# ------------------------------------------------------------------------------


@pytest.fixture
def quarter_values():
    return symmetric_values(KLEMS_QUARTER.nbins)


@pytest.fixture
def quarter_file(tmpdir, quarter_values):
    """A reciprocal Klems Quarter dataset with all four hemispheres."""
    filename = tmpdir.join("quarter.xml")
    write_window_xml(
        filename,
        {
            Hemisphere.FRONT_REFLECTION: quarter_values,
            Hemisphere.BACK_REFLECTION: quarter_values,
            Hemisphere.FRONT_TRANSMISSION: quarter_values,
            Hemisphere.BACK_TRANSMISSION: quarter_values.T,
        },
    )
    return filename


@pytest.fixture
def uniform_file(tmpdir):
    """A Klems Quarter dataset with a uniform front transmission."""
    filename = tmpdir.join("uniform.xml")
    values = np.full((KLEMS_QUARTER.nbins, KLEMS_QUARTER.nbins), 1.0 / np.pi)
    write_window_xml(filename, {Hemisphere.FRONT_TRANSMISSION: values})
    return filename


# ------------------------------------------------------------------------------
#                              Other configuration
# ------------------------------------------------------------------------------


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with -m 'not slow')"
    )
