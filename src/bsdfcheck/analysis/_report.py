from __future__ import annotations

import logging
import typing as t

from ._classify import BSDFType, classify
from ._reciprocity import Evaluator, check_reciprocity, format_reciprocity
from ._summary import summarize_hemisphere
from ..bsdf import Hemisphere, LoadedBSDF, evaluate, open_bsdf
from ..config import settings
from ..exceptions import BSDFCheckError, UsageError
from ..typing import PathLike

logger = logging.getLogger(__name__)

#: Hemisphere summary lines, in report order.
HEMISPHERE_LINES: tuple[tuple[str, Hemisphere], ...] = (
    ("Internal Refl", Hemisphere.FRONT_REFLECTION),
    ("External Refl", Hemisphere.BACK_REFLECTION),
    ("Int->Ext Trans", Hemisphere.FRONT_TRANSMISSION),
    ("Ext->Int Trans", Hemisphere.BACK_TRANSMISSION),
)

#: Reciprocity lines, in report order: (label, side1, side2).
RECIPROCITY_LINES: tuple[tuple[str, int, int], ...] = (
    ("Front Refl", 1, 1),
    ("Back Refl", -1, -1),
    ("Transmission", -1, 1),
)


def header_lines(bsdf: LoadedBSDF, bsdf_type: BSDFType) -> list[str]:
    width, height, thickness = bsdf.dimensions.m_as("cm")
    return [
        f"Manufacturer: '{bsdf.manufacturer}'",
        f"BSDF Name: '{bsdf.product_name}'",
        f"Dimensions (W x H x Thickness): {width:g} x {height:g} x {thickness:g} cm",
        f"Type: {bsdf_type.label}",
        f"Color: {int(bsdf_type.is_color_resolved)}",
        f"Has Geometry: {int(bsdf.geometry is not None)}",
    ]


def report_lines(
    bsdf: LoadedBSDF,
    threshold: float | None = None,
    evaluator: Evaluator = evaluate,
) -> t.Iterator[str]:
    """
    Generate the report of a loaded dataset, line by line (without the
    leading file name line).

    Lines are produced as the analysis progresses, so that everything
    computed before a failure has already been emitted when an
    :class:`.EvaluationError` propagates.
    """
    bsdf_type = classify(bsdf)
    yield from header_lines(bsdf, bsdf_type)

    yield "Component\tLambertian XYZ %\tMax. Dir\tMin. Angle"
    for label, hemisphere in HEMISPHERE_LINES:
        yield summarize_hemisphere(
            label, bsdf.lambertian(hemisphere), bsdf.distribution(hemisphere)
        )

    yield "Component\tReciprocity Error (min/avg/max %)"
    for label, side1, side2 in RECIPROCITY_LINES:
        stats = check_reciprocity(
            bsdf, side1, side2, bsdf_type, threshold=threshold, evaluator=evaluator
        )
        yield format_reciprocity(label, stats)


def check_file(
    name: PathLike,
    echo: t.Callable[[str], t.Any] = print,
    resolver=None,
    threshold: float | None = None,
    evaluator: Evaluator = evaluate,
) -> None:
    """
    Locate, load and report on one BSDF file. The dataset is released on
    every exit path.

    Raises
    ------
    BSDFCheckError
        If the file cannot be located, loaded or evaluated.
    """
    echo(f"File: '{name}'")
    with open_bsdf(name, resolver=resolver) as bsdf:
        for line in report_lines(bsdf, threshold=threshold, evaluator=evaluator):
            echo(line)


def run_checks(
    filenames: t.Sequence[PathLike],
    echo: t.Callable[[str], t.Any] = print,
    error: t.Callable[[str], t.Any] = print,
    resolver=None,
    threshold: float | None = None,
    evaluator: Evaluator = evaluate,
) -> int:
    """
    Report on files in order, stopping at the first failure.

    Parameters
    ----------
    filenames : sequence of path-like
        Files to check.

    echo : callable, optional
        Called with each report line.

    error : callable, optional
        Called with the diagnostic line of a failure.

    resolver : .FileResolver, optional
        File resolver used to locate files.

    threshold : float, optional
        Negligible forward value for reciprocity checks.

    evaluator : callable, optional
        Full BSDF evaluator used by reciprocity checks.

    Returns
    -------
    int
        Exit status: 0 if all files were processed, 1 otherwise (including
        when no file is given).
    """
    try:
        if not filenames:
            raise UsageError()

        for name in filenames:
            echo(settings.separator)
            check_file(
                name,
                echo=echo,
                resolver=resolver,
                threshold=threshold,
                evaluator=evaluator,
            )
    except BSDFCheckError as e:
        logger.debug("Stopping after failure", exc_info=True)
        error(str(e))
        return 1

    return 0
