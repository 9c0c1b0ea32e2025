"""Fixed angle bases and the matrix (grid) component."""

from __future__ import annotations

import logging
import math
import typing as t

import attrs
import numpy as np

from ._core import WHITE_CX, WHITE_CY, ColorValue, Component, ComponentKind, Side
from ..attrs import documented, frozen, define
from ..frame import angles_to_direction, direction_to_angles

logger = logging.getLogger(__name__)


def _rings_converter(value) -> tuple[tuple[float, float, int], ...]:
    return tuple((float(tmin), float(tmax), int(nphi)) for tmin, tmax, nphi in value)


def _rings_validator(instance, attribute, value):
    if not value:
        raise ValueError(f"'{attribute.name}' must contain at least one ring")

    previous_tmax = 0.0
    for tmin, tmax, nphi in value:
        if not math.isclose(tmin, previous_tmax, abs_tol=1e-6):
            raise ValueError(
                f"'{attribute.name}' rings must be contiguous and start at 0°, "
                f"got a ring starting at {tmin}° after {previous_tmax}°"
            )
        if tmax <= tmin:
            raise ValueError(f"'{attribute.name}' ring [{tmin}, {tmax}] is empty")
        if nphi < 1:
            raise ValueError(f"'{attribute.name}' ring has {nphi} azimuthal bins")
        previous_tmax = tmax

    if not math.isclose(previous_tmax, 90.0, abs_tol=1e-6):
        raise ValueError(
            f"'{attribute.name}' rings must cover the hemisphere up to 90°, "
            f"got {previous_tmax}°"
        )


@frozen
class AngleBasis:
    """
    Hemisphere subdivision into rings of constant zenith angle, each ring
    split into equal azimuthal bins. Bin 0 is the first bin of the innermost
    ring and the first bin of a ring is centred on the +x azimuth.
    """

    name: str = documented(
        attrs.field(converter=str),
        doc="Basis name, *e.g.* ``\"LBNL/Klems Full\"``.",
        type="str",
    )

    rings: tuple[tuple[float, float, int], ...] = documented(
        attrs.field(converter=_rings_converter, validator=_rings_validator),
        doc="Sequence of (θ min, θ max, azimuthal bin count) triplets, "
        "θ being in degrees.",
        type="tuple",
        init_type="sequence of 3-tuples",
    )

    _offsets: tuple[int, ...] = attrs.field(init=False, repr=False)

    @_offsets.default
    def _offsets_default(self):
        return tuple(np.cumsum([0] + [nphi for _, _, nphi in self.rings]).tolist())

    @property
    def nbins(self) -> int:
        return self._offsets[-1]

    def _locate(self, index: int) -> tuple[int, int]:
        ring = int(np.searchsorted(self._offsets, index, side="right")) - 1
        return ring, index - self._offsets[ring]

    def vector(self, ndxr: float, side: int = Side.FRONT) -> np.ndarray | None:
        """
        Direction for a fractional bin index. The integer part selects the
        bin; the fractional part positions the direction within the bin, 0.5
        being the bin centre.

        Parameters
        ----------
        ndxr : float
            Fractional bin index.

        side : {1, -1}
            Surface side the returned direction points to.

        Returns
        -------
        ndarray or None
            Unit direction vector, or ``None`` if ``ndxr`` is out of range.
        """
        if not (0.0 <= ndxr < self.nbins):
            return None

        index = int(ndxr)
        frac = ndxr - index
        ring, iphi = self._locate(index)
        tmin, tmax, nphi = self.rings[ring]

        # Interpolate in cos² so that the fraction splits projected solid angle
        cos2 = (1.0 - frac) * math.cos(math.radians(tmin)) ** 2 + frac * math.cos(
            math.radians(tmax)
        ) ** 2
        theta = math.acos(min(1.0, math.sqrt(cos2)))
        phi = 2.0 * math.pi * (iphi + frac - 0.5) / nphi

        return angles_to_direction(theta, phi, side)

    def index(self, v: np.ndarray) -> int:
        """
        Bin index of a direction, regardless of the side it points to.

        Returns
        -------
        int
            Bin index, or -1 if the direction cannot be resolved.
        """
        try:
            theta, phi = direction_to_angles(v)
        except ValueError:
            return -1

        theta = math.degrees(theta)
        for ring, (tmin, tmax, nphi) in enumerate(self.rings):
            if theta <= tmax or ring == len(self.rings) - 1:
                iphi = int(math.floor((phi + math.pi / nphi) / (2.0 * math.pi / nphi)))
                return self._offsets[ring] + iphi % nphi

        return -1

    def proj_solid_angle(self, index: int) -> float:
        """
        Projected solid angle of a bin [sr].
        """
        ring, _ = self._locate(index)
        tmin, tmax, nphi = self.rings[ring]
        return (
            math.pi
            * (math.sin(math.radians(tmax)) ** 2 - math.sin(math.radians(tmin)) ** 2)
            / nphi
        )

    def proj_solid_angles(self) -> np.ndarray:
        return np.array([self.proj_solid_angle(i) for i in range(self.nbins)])


# fmt: off
KLEMS_FULL = AngleBasis(
    "LBNL/Klems Full",
    [(0, 5, 1), (5, 15, 8), (15, 25, 16), (25, 35, 20), (35, 45, 24),
     (45, 55, 24), (55, 65, 24), (65, 75, 16), (75, 90, 12)],
)
KLEMS_HALF = AngleBasis(
    "LBNL/Klems Half",
    [(0, 6.5, 1), (6.5, 19.5, 8), (19.5, 32.5, 12), (32.5, 46.5, 16),
     (46.5, 61.5, 20), (61.5, 76.5, 12), (76.5, 90, 4)],
)
KLEMS_QUARTER = AngleBasis(
    "LBNL/Klems Quarter",
    [(0, 9, 1), (9, 27, 8), (27, 46, 12), (46, 66, 12), (66, 90, 8)],
)
# fmt: on

#: Angle bases known without an explicit definition in data files.
STANDARD_BASES: dict[str, AngleBasis] = {
    basis.name.lower(): basis for basis in (KLEMS_FULL, KLEMS_HALF, KLEMS_QUARTER)
}


def get_standard_basis(name: str) -> AngleBasis | None:
    """Look up a standard angle basis by name (case-insensitive)."""
    return STANDARD_BASES.get(name.strip().lower())


def _values_converter(value) -> np.ndarray:
    return np.array(value, dtype=float, ndmin=2)


@define(eq=False)
class GridMatrix(Component):
    """
    Matrix BSDF component defined on fixed incident and exitant angle bases.
    Values are BSDF values [1/sr] indexed as ``values[out_bin, in_bin]``.
    """

    kind: t.ClassVar[ComponentKind] = ComponentKind.GRID_MATRIX

    in_basis: AngleBasis = documented(
        attrs.field(validator=attrs.validators.instance_of(AngleBasis)),
        doc="Incident direction basis.",
        type=".AngleBasis",
    )

    out_basis: AngleBasis = documented(
        attrs.field(validator=attrs.validators.instance_of(AngleBasis)),
        doc="Exitant direction basis.",
        type=".AngleBasis",
    )

    values: np.ndarray = documented(
        attrs.field(converter=_values_converter),
        doc="BSDF values, shaped (n_out, n_in).",
        type="ndarray",
        init_type="array-like",
    )

    in_side: Side = documented(
        attrs.field(default=Side.FRONT, converter=Side),
        doc="Side incident directions point to.",
        type=".Side",
        default="Side.FRONT",
    )

    out_side: Side = documented(
        attrs.field(default=Side.FRONT, converter=Side),
        doc="Side exitant directions point to.",
        type=".Side",
        default="Side.FRONT",
    )

    chroma: np.ndarray | None = documented(
        attrs.field(
            default=None,
            converter=attrs.converters.optional(
                lambda x: np.asarray(x, dtype=float)
            ),
        ),
        doc="Per-bin (x, y) chromaticity, shaped (2, n_out, n_in). ``None`` "
        "for luminance-only data.",
        type="ndarray or None",
        default="None",
    )

    @values.validator
    def _values_validator(self, attribute, value):
        expected = (self.out_basis.nbins, self.in_basis.nbins)
        if value.shape != expected:
            raise ValueError(
                f"'{attribute.name}' must have shape {expected} "
                f"(n_out, n_in), got {value.shape}"
            )

    @chroma.validator
    def _chroma_validator(self, attribute, value):
        if value is not None and value.shape != (2,) + self.values.shape:
            raise ValueError(
                f"'{attribute.name}' must have shape {(2,) + self.values.shape}, "
                f"got {value.shape}"
            )

    @property
    def n_in(self) -> int:
        return self.in_basis.nbins

    @property
    def n_out(self) -> int:
        return self.out_basis.nbins

    @property
    def has_chroma(self) -> bool:
        return self.chroma is not None

    def in_vec(self, ndxr: float) -> np.ndarray | None:
        return self.in_basis.vector(ndxr, self.in_side)

    def out_vec(self, ndxr: float) -> np.ndarray | None:
        return self.out_basis.vector(ndxr, self.out_side)

    def in_index(self, v: np.ndarray) -> int:
        return self.in_basis.index(v)

    def out_index(self, v: np.ndarray) -> int:
        return self.out_basis.index(v)

    def value(self, o: int, i: int) -> float:
        return float(self.values[o, i])

    def color(self, o: int, i: int) -> ColorValue:
        if self.chroma is None:
            return ColorValue(self.values[o, i], WHITE_CX, WHITE_CY)
        return ColorValue(self.values[o, i], self.chroma[0, o, i], self.chroma[1, o, i])

    def evaluate(self, in_dir: np.ndarray, out_dir: np.ndarray) -> ColorValue | None:
        i = self.in_index(in_dir)
        o = self.out_index(out_dir)
        if i < 0 or o < 0:
            return None
        return self.color(o, i)

    def hemispherical_extrema(self) -> tuple[float, float]:
        out_psa = self.out_basis.proj_solid_angles()
        hemi = out_psa @ self.values  # Integral over exitant bins, per incident bin
        min_proj_sa = min(out_psa.min(), self.in_basis.proj_solid_angles().min())
        return float(hemi.max()), float(min_proj_sa)

    def extract_diffuse(self) -> ColorValue:
        """
        Move the constant part of the matrix into a Lambertian value. The
        minimum matrix value is subtracted in place and returned as a
        hemispherical fraction (π times the BSDF value).
        """
        vmin = float(self.values.min())
        if vmin <= 0.0:
            return ColorValue.zero()

        self.values -= vmin
        logger.debug("Extracted diffuse BSDF value %g", vmin)
        return ColorValue(math.pi * vmin)
