from __future__ import annotations

import logging
import math

from ._core import ColorValue, ComponentKind, Hemisphere, LoadedBSDF
from ..exceptions import EvaluationError
from ..frame import normalize
from ..typing import DirectionLike

logger = logging.getLogger(__name__)


def evaluate(
    out_dir: DirectionLike, in_dir: DirectionLike, bsdf: LoadedBSDF
) -> ColorValue:
    """
    Evaluate a BSDF for a pair of directions.

    Both directions point away from the surface; the hemisphere is selected
    from the sides they point to. The result is the Lambertian baseline of
    that hemisphere divided by π, plus the contribution of every component of
    its distribution.

    Parameters
    ----------
    out_dir : array-like
        Exitant direction.

    in_dir : array-like
        Incident direction (pointing toward the source).

    bsdf : .LoadedBSDF
        Dataset to evaluate.

    Returns
    -------
    .ColorValue
        BSDF value [1/sr].

    Raises
    ------
    EvaluationError
        If the directions are invalid, the dataset has been released or one
        of the components has no data for the direction pair.
    """
    if bsdf.released:
        raise EvaluationError(f"BSDF '{bsdf.name}' has been released")

    try:
        out_dir = normalize(out_dir)
        in_dir = normalize(in_dir)
        hemisphere = Hemisphere.from_directions(in_dir, out_dir)
    except ValueError as e:
        raise EvaluationError(f"cannot evaluate BSDF '{bsdf.name}': {e}") from e

    result = bsdf.lambertian(hemisphere).scaled(1.0 / math.pi)
    distribution = bsdf.distribution(hemisphere)
    if distribution is None:
        return result

    for component in distribution.components:
        kind = getattr(component, "kind", None)
        if not isinstance(kind, ComponentKind):
            raise EvaluationError(f"unsupported component representation {kind!r}")

        value = component.evaluate(in_dir, out_dir)
        if value is None:
            raise EvaluationError(
                f"no {hemisphere.name.lower().replace('_', ' ')} data in "
                f"'{bsdf.name}' for incident direction {in_dir} and exitant "
                f"direction {out_dir}"
            )
        result = result + value

    return result
