from __future__ import annotations

import enum
import logging
import typing as t
from abc import ABC, abstractmethod

import attrs
import numpy as np
import pint

from ..attrs import define, documented, frozen
from ..frame import side_of
from ..units import unit_registry as ureg

logger = logging.getLogger(__name__)

#: Chromaticity of the equal-energy white point, used when no colour data is
#: available.
WHITE_CX = WHITE_CY = 1.0 / 3.0

# Smallest chromaticity y coordinate for which a division is attempted
_CY_MIN = 1e-9


# ------------------------------------------------------------------------------
#                                    Colour
# ------------------------------------------------------------------------------


@frozen
class ColorValue:
    """
    A colorimetric value: CIE Y luminance with (x, y) chromaticity.
    """

    cie_y: float = documented(
        attrs.field(default=0.0, converter=float),
        doc="CIE Y (luminance) component.",
        type="float",
        default="0.0",
    )

    cx: float = documented(
        attrs.field(default=WHITE_CX, converter=float),
        doc="CIE x chromaticity coordinate.",
        type="float",
        default="1/3",
    )

    cy: float = documented(
        attrs.field(default=WHITE_CY, converter=float),
        doc="CIE y chromaticity coordinate. May only be (close to) zero if "
        "the luminance is zero.",
        type="float",
        default="1/3",
    )

    @classmethod
    def zero(cls) -> ColorValue:
        return cls(0.0)

    @classmethod
    def from_xyz(cls, x: float, y: float, z: float) -> ColorValue:
        """
        Build a colour value from CIE XYZ tristimulus values. A zero sum
        yields the white point chromaticity.
        """
        total = x + y + z
        if total <= 0.0:
            return cls(y)
        return cls(y, x / total, y / total)

    def to_xyz(self) -> tuple[float, float, float]:
        """
        Recover CIE XYZ tristimulus values. Values without a usable
        chromaticity (``cy`` close to zero) only carry luminance.
        """
        if self.cie_y == 0.0 or abs(self.cy) < _CY_MIN:
            return 0.0, self.cie_y, 0.0

        x = self.cie_y * self.cx / self.cy
        z = self.cie_y * (1.0 - self.cx - self.cy) / self.cy
        return x, self.cie_y, z

    def scaled(self, factor: float) -> ColorValue:
        return attrs.evolve(self, cie_y=self.cie_y * factor)

    def __add__(self, other: ColorValue) -> ColorValue:
        if not isinstance(other, ColorValue):
            return NotImplemented

        if other.cie_y == 0.0:
            return self
        if self.cie_y == 0.0:
            return other

        x1, y1, z1 = self.to_xyz()
        x2, y2, z2 = other.to_xyz()
        return ColorValue.from_xyz(x1 + x2, y1 + y2, z1 + z2)


# ------------------------------------------------------------------------------
#                               Hemispheres
# ------------------------------------------------------------------------------


class Side(enum.IntEnum):
    """Surface sides. The front side is the "outside" and faces +z."""

    FRONT = 1
    BACK = -1


class Hemisphere(enum.Enum):
    """
    The four light transport combinations of a BSDF. Each member holds
    (incident side, exitant side).
    """

    FRONT_REFLECTION = (Side.FRONT, Side.FRONT)
    BACK_REFLECTION = (Side.BACK, Side.BACK)
    FRONT_TRANSMISSION = (Side.FRONT, Side.BACK)
    BACK_TRANSMISSION = (Side.BACK, Side.FRONT)

    @property
    def in_side(self) -> Side:
        return self.value[0]

    @property
    def out_side(self) -> Side:
        return self.value[1]

    @property
    def is_reflection(self) -> bool:
        return self.in_side == self.out_side

    @property
    def key(self) -> str:
        """Name of the :class:`.LoadedBSDF` attribute holding the distribution."""
        return self.name.lower()

    @staticmethod
    def from_sides(in_side: int, out_side: int) -> Hemisphere:
        """
        Select a hemisphere from incident and exitant sides (+1 or -1).

        Raises
        ------
        ValueError
            If either side is not ±1.
        """
        try:
            return Hemisphere((Side(in_side), Side(out_side)))
        except ValueError as e:
            raise ValueError(
                f"invalid side pair ({in_side}, {out_side}); sides must be ±1"
            ) from e

    @staticmethod
    def from_directions(in_dir: np.ndarray, out_dir: np.ndarray) -> Hemisphere:
        """
        Select a hemisphere from the z components of an incident and an
        exitant direction.

        Raises
        ------
        ValueError
            If either direction lies in the surface plane.
        """
        in_side, out_side = side_of(in_dir), side_of(out_dir)
        if in_side == 0 or out_side == 0:
            raise ValueError("directions in the surface plane have no hemisphere")
        return Hemisphere.from_sides(in_side, out_side)


#: Order in which distributions are inspected to determine the representation
#: of a dataset.
DISTRIBUTION_PRIORITY: tuple[Hemisphere, ...] = (
    Hemisphere.BACK_TRANSMISSION,
    Hemisphere.FRONT_TRANSMISSION,
    Hemisphere.FRONT_REFLECTION,
    Hemisphere.BACK_REFLECTION,
)


# ------------------------------------------------------------------------------
#                                 Components
# ------------------------------------------------------------------------------


class ComponentKind(enum.Enum):
    """Representation variants of a scattering distribution component."""

    GRID_MATRIX = "grid_matrix"  #: Fixed angle basis matrix (e.g. Klems)
    TENSOR_TREE = "tensor_tree"  #: Adaptive angular subdivision


@define(eq=False)
class Component(ABC):
    """
    Abstract base class for the representation variants of a non-diffuse
    scattering distribution. Concrete classes declare their variant with the
    :attr:`kind` class attribute.
    """

    kind: t.ClassVar[ComponentKind]

    @property
    @abstractmethod
    def has_chroma(self) -> bool:
        """``True`` if the component carries per-direction colour data."""
        pass

    @abstractmethod
    def evaluate(self, in_dir: np.ndarray, out_dir: np.ndarray) -> ColorValue | None:
        """
        Evaluate the component for a pair of directions pointing away from
        the surface. Returns ``None`` when the pair is not covered by the
        component data.
        """
        pass

    @abstractmethod
    def hemispherical_extrema(self) -> tuple[float, float]:
        """
        Compute the peak hemispherical integral and minimum projected solid
        angle of the component.
        """
        pass


@define(eq=False)
class SpectralDistribution:
    """
    Non-diffuse scattering distribution for one hemisphere.
    """

    components: list[Component] = documented(
        attrs.field(
            converter=list,
            validator=attrs.validators.min_len(1),
        ),
        doc="Components making up the distribution. Only the first one is "
        "used to determine the representation of a dataset.",
        type="list of .Component",
    )

    max_hemi: float = documented(
        attrs.field(default=0.0, converter=float),
        doc="Maximum over incident directions of the hemispherically "
        "integrated scattered fraction.",
        type="float",
        default="0.0",
    )

    min_proj_sa: float = documented(
        attrs.field(default=np.pi, converter=float),
        doc="Smallest projected solid angle among resolved scattering "
        "peaks [sr].",
        type="float",
        default="π",
    )

    @classmethod
    def from_component(cls, component: Component) -> SpectralDistribution:
        """
        Wrap a single component, computing the distribution summaries from it.
        """
        max_hemi, min_proj_sa = component.hemispherical_extrema()
        return cls([component], max_hemi=max_hemi, min_proj_sa=min_proj_sa)


# ------------------------------------------------------------------------------
#                                Loaded BSDF
# ------------------------------------------------------------------------------


def _dimensions_converter(value) -> pint.Quantity:
    if isinstance(value, pint.Quantity):
        return value.to(ureg.m)
    return ureg.Quantity(np.asarray(value, dtype=float), ureg.m)


def _distribution_field(doc: str):
    return documented(
        attrs.field(
            default=None,
            validator=attrs.validators.optional(
                attrs.validators.instance_of(SpectralDistribution)
            ),
        ),
        doc=doc,
        type=".SpectralDistribution or None",
        default="None",
    )


def _lambertian_field(doc: str):
    return documented(
        attrs.field(
            factory=ColorValue.zero,
            validator=attrs.validators.instance_of(ColorValue),
        ),
        doc=doc,
        type=".ColorValue",
        default="ColorValue.zero()",
    )


@define(eq=False)
class LoadedBSDF:
    """
    In-memory BSDF dataset.

    A dataset is filled by the loader, consumed read-only by the analysis
    routines and released once its report is complete. It can be used as a
    context manager, in which case it is released on exit.
    """

    name: str = documented(
        attrs.field(default="", converter=str),
        doc="Name the dataset was requested with (usually a file name).",
        type="str",
        default='""',
    )

    manufacturer: str = documented(
        attrs.field(default="", converter=str),
        doc="Manufacturer name.",
        type="str",
        default='""',
    )

    product_name: str = documented(
        attrs.field(default="", converter=str),
        doc="Product or material name.",
        type="str",
        default='""',
    )

    dimensions: pint.Quantity = documented(
        attrs.field(
            factory=lambda: [0.0, 0.0, 0.0],
            converter=_dimensions_converter,
        ),
        doc="Width, height and thickness of the sample. Unitless values are "
        "interpreted as metres.",
        type="quantity",
        init_type="quantity or array-like",
        default="[0, 0, 0] m",
    )

    front_reflection: SpectralDistribution | None = _distribution_field(
        "Front (exterior) reflection distribution."
    )
    back_reflection: SpectralDistribution | None = _distribution_field(
        "Back (interior) reflection distribution."
    )
    front_transmission: SpectralDistribution | None = _distribution_field(
        "Front-to-back transmission distribution."
    )
    back_transmission: SpectralDistribution | None = _distribution_field(
        "Back-to-front transmission distribution."
    )

    front_reflection_lambertian: ColorValue = _lambertian_field(
        "Diffuse front reflection."
    )
    back_reflection_lambertian: ColorValue = _lambertian_field(
        "Diffuse back reflection."
    )
    front_transmission_lambertian: ColorValue = _lambertian_field(
        "Diffuse front-to-back transmission."
    )
    back_transmission_lambertian: ColorValue = _lambertian_field(
        "Diffuse back-to-front transmission."
    )

    geometry: t.Any = documented(
        attrs.field(default=None),
        doc="Detailed geometry description, if any. Opaque.",
        type="object or None",
        default="None",
    )

    released: bool = attrs.field(default=False, init=False)

    def distribution(self, hemisphere: Hemisphere) -> SpectralDistribution | None:
        return getattr(self, hemisphere.key)

    def lambertian(self, hemisphere: Hemisphere) -> ColorValue:
        return getattr(self, f"{hemisphere.key}_lambertian")

    def set_distribution(
        self, hemisphere: Hemisphere, value: SpectralDistribution | None
    ) -> None:
        setattr(self, hemisphere.key, value)

    def set_lambertian(self, hemisphere: Hemisphere, value: ColorValue) -> None:
        setattr(self, f"{hemisphere.key}_lambertian", value)

    def release(self) -> None:
        """
        Drop all distribution data held by this dataset. Releasing an already
        released dataset does nothing.
        """
        if self.released:
            return

        for hemisphere in Hemisphere:
            self.set_distribution(hemisphere, None)
        self.geometry = None
        self.released = True
        logger.debug("Released BSDF '%s'", self.name)

    def __enter__(self) -> LoadedBSDF:
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.release()
