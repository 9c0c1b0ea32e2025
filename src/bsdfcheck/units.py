from __future__ import annotations

__all__ = [
    "to_quantity",
    "unit_registry",
]

import logging

import numpy as np
import pint

logger = logging.getLogger(__name__)

#: Unit registry common to all bsdfcheck components. All units used in
#: bsdfcheck must be created using this registry.
unit_registry = pint.get_application_registry()


def to_quantity(value, units: str | None) -> pint.Quantity:
    """
    Attach units to a value read from a data file.

    Unit names found in BSDF files are not normalized (*e.g.* ``"Meter"``,
    ``"Millimeter"``); they are lower-cased before being handed to the unit
    registry. A missing unit string defaults to metres.

    Parameters
    ----------
    value : float or array-like
        Magnitude.

    units : str or None
        Unit string.

    Returns
    -------
    quantity
        The corresponding Pint quantity.

    Raises
    ------
    ValueError
        If the unit string cannot be interpreted.
    """
    if units is None or not units.strip():
        units = "meter"

    try:
        unit = unit_registry.Unit(units.strip().lower())
    except (pint.UndefinedUnitError, AttributeError, ValueError) as e:
        raise ValueError(f"unknown unit '{units}'") from e

    return unit_registry.Quantity(np.asarray(value, dtype=float), unit)
