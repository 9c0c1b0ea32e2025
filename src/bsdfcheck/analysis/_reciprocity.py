"""Helmholtz reciprocity check for matrix BSDF data.

A BSDF is reciprocal if its value is unchanged when incident and exitant
directions are swapped. For each pair of basis bins with a non-negligible
forward value, the matrix value is compared to a full evaluation of the BSDF
with the bin directions swapped; the relative discrepancies are summarized as
(min, mean, max) percentages.
"""

from __future__ import annotations

import logging
import typing as t

import attrs

from ._classify import BSDFType
from ..attrs import define
from ..bsdf import ColorValue, ComponentKind, Hemisphere, LoadedBSDF, evaluate
from ..config import settings

logger = logging.getLogger(__name__)

#: Signature of a full BSDF evaluator: (exitant, incident, dataset) -> value.
Evaluator = t.Callable[[t.Any, t.Any, LoadedBSDF], ColorValue]


@define
class ReciprocityStats:
    """
    Relative reciprocity error statistics [%] over the tested bin pairs.
    """

    count: int = attrs.field(default=0)
    min: float = attrs.field(default=0.0)
    max: float = attrs.field(default=0.0)
    sum: float = attrs.field(default=0.0)

    @property
    def has_data(self) -> bool:
        return self.count > 0

    @property
    def mean(self) -> float:
        if not self.count:
            return 0.0
        # Keep rounding from pushing the mean outside [min, max]
        return min(max(self.sum / self.count, self.min), self.max)

    def add(self, error: float) -> None:
        if self.count == 0:
            self.min = self.max = error
        else:
            self.min = min(self.min, error)
            self.max = max(self.max, error)
        self.sum += error
        self.count += 1


def relative_error(forward: float, reverse: float) -> float:
    """Relative discrepancy [%] of a reverse value with respect to a forward one."""
    return 100.0 * abs(forward - reverse) / forward


def check_reciprocity(
    bsdf: LoadedBSDF,
    side1: int,
    side2: int,
    bsdf_type: BSDFType,
    threshold: float | None = None,
    evaluator: Evaluator = evaluate,
) -> ReciprocityStats:
    """
    Compute reciprocity errors for one side combination.

    Parameters
    ----------
    bsdf : .LoadedBSDF
        Dataset to check.

    side1, side2 : {1, -1}
        Sides involved (+1 is the front). Equal sides select the reflection
        on that side; different sides select transmission.

    bsdf_type : .BSDFType
        Classification of ``bsdf``. Only matrix data is sampled; other
        representations yield empty statistics.

    threshold : float, optional
        Forward values at or below this are not tested. Defaults to the
        ``NEGLIGIBLE_VALUE`` setting.

    evaluator : callable, optional
        Full BSDF evaluator called as ``evaluator(out_dir, in_dir, bsdf)``.

    Returns
    -------
    .ReciprocityStats

    Raises
    ------
    EvaluationError
        If a reverse evaluation fails. The whole check is aborted.
    """
    stats = ReciprocityStats()

    if threshold is None:
        threshold = float(settings.negligible_value)

    if side1 == side2:
        hemisphere = (
            Hemisphere.FRONT_REFLECTION if side1 > 0 else Hemisphere.BACK_REFLECTION
        )
        distribution = bsdf.distribution(hemisphere)
        if distribution is None:
            return stats
    else:
        if bsdf.front_transmission is None or bsdf.back_transmission is None:
            return stats
        # Transmission is always checked from the front transmission data
        distribution = bsdf.front_transmission

    if not bsdf_type.is_matrix:
        return stats

    # Hemispheres may use different representations
    matrix = distribution.components[0]
    if matrix.kind is not ComponentKind.GRID_MATRIX:
        return stats

    for i in range(matrix.n_in):
        vin = matrix.in_vec(i + 0.5)
        if vin is None:
            continue

        for o in range(matrix.n_out):
            vout = matrix.out_vec(o + 0.5)
            if vout is None:
                continue

            forward = matrix.value(o, i)
            if forward <= threshold:
                continue

            reverse = evaluator(vin, vout, bsdf)
            stats.add(relative_error(forward, reverse.cie_y))

    logger.debug("Tested %d bin pairs (sides %d, %d)", stats.count, side1, side2)
    return stats


def format_reciprocity(label: str, stats: ReciprocityStats) -> str:
    """Format a reciprocity report line."""
    if not stats.has_data:
        return f"{label}\t0\t0\t0"
    return f"{label}\t{stats.min:.1f}\t{stats.mean:.1f}\t{stats.max:.1f}"
