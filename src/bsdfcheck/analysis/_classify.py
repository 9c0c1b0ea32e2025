from __future__ import annotations

import enum
import typing as t

import attrs

from ..attrs import documented, frozen
from ..bsdf import DISTRIBUTION_PRIORITY, ComponentKind, Hemisphere, LoadedBSDF


class BSDFTypeFlags(enum.Flag):
    """
    Properties of a BSDF representation.
    """

    NONE = 0
    IN_COLOR = enum.auto()  #: Per-direction colour data is available
    ISOTROPIC = enum.auto()  #: Scattering is independent of incident azimuth
    MATRIX = enum.auto()  #: Fixed angle basis matrix
    TENSOR_TREE = enum.auto()  #: Adaptive tensor tree


#: Labels of the standard Klems bases, indexed by incident bin count.
KLEMS_LABELS: dict[int, str] = {
    145: "Klems_Full",
    73: "Klems_Half",
    41: "Klems_Quarter",
}


@frozen
class BSDFType:
    """
    Classification of the representation used by a BSDF dataset.
    """

    label: str = documented(
        attrs.field(converter=str),
        doc="Representation label, *e.g.* ``\"Klems_Full\"``.",
        type="str",
    )

    flags: BSDFTypeFlags = documented(
        attrs.field(default=BSDFTypeFlags.NONE, converter=BSDFTypeFlags),
        doc="Representation properties.",
        type=".BSDFTypeFlags",
        default="BSDFTypeFlags.NONE",
    )

    @property
    def is_color_resolved(self) -> bool:
        return bool(self.flags & BSDFTypeFlags.IN_COLOR)

    @property
    def is_isotropic(self) -> bool:
        return bool(self.flags & BSDFTypeFlags.ISOTROPIC)

    @property
    def is_matrix(self) -> bool:
        return bool(self.flags & BSDFTypeFlags.MATRIX)

    @property
    def is_tensor_tree(self) -> bool:
        return bool(self.flags & BSDFTypeFlags.TENSOR_TREE)


def classify(
    bsdf: LoadedBSDF, priority: t.Sequence[Hemisphere] = DISTRIBUTION_PRIORITY
) -> BSDFType:
    """
    Determine the representation of a dataset from the first component of
    its first available distribution.

    Parameters
    ----------
    bsdf : .LoadedBSDF
        Dataset to classify.

    priority : sequence of .Hemisphere, optional
        Order in which distributions are looked up. Defaults to back
        transmission, front transmission, front reflection, back reflection.

    Returns
    -------
    .BSDFType
    """
    distribution = next(
        (
            bsdf.distribution(hemisphere)
            for hemisphere in priority
            if bsdf.distribution(hemisphere) is not None
        ),
        None,
    )
    if distribution is None:
        return BSDFType("Pure_Lambertian")

    component = distribution.components[0]
    kind = getattr(component, "kind", None)

    if kind is ComponentKind.GRID_MATRIX:
        flags = BSDFTypeFlags.MATRIX
        if component.has_chroma:
            flags |= BSDFTypeFlags.IN_COLOR
        return BSDFType(KLEMS_LABELS.get(component.n_in, "Unknown_Matrix"), flags)

    if kind is ComponentKind.TENSOR_TREE:
        flags = BSDFTypeFlags.TENSOR_TREE
        if component.has_chroma:
            flags |= BSDFTypeFlags.IN_COLOR
        if component.ndim == 4:
            return BSDFType("Anisotropic_Tensor_Tree", flags)
        if component.ndim == 3:
            return BSDFType("Isotropic_Tensor_Tree", flags | BSDFTypeFlags.ISOTROPIC)
        return BSDFType("Unknown_Tensor_Tree", flags)

    return BSDFType("Unknown")
