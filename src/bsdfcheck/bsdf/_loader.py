"""
Loader for BSDF data in the LBNL WINDOW XML format.
"""

from __future__ import annotations

import logging
import typing as t
from contextlib import contextmanager
from pathlib import Path

import numpy as np
from lxml import etree

from ._core import Hemisphere, LoadedBSDF, SpectralDistribution
from ._matrix import AngleBasis, GridMatrix, get_standard_basis
from ._tree import TensorTree, parse_tree
from ..config import settings
from ..exceptions import LoadError
from ..resolver import fresolver
from ..typing import PathLike
from ..units import to_quantity

logger = logging.getLogger(__name__)

#: Mapping of data block direction labels to hemispheres.
DIRECTIONS: dict[str, Hemisphere] = {
    "reflection front": Hemisphere.FRONT_REFLECTION,
    "reflection back": Hemisphere.BACK_REFLECTION,
    "transmission front": Hemisphere.FRONT_TRANSMISSION,
    "transmission back": Hemisphere.BACK_TRANSMISSION,
}

_TREE_STRUCTURES = {"tensortree3": 3, "tensortree4": 4}


class _Malformed(Exception):
    # Internal: turned into a LoadError carrying the file name
    pass


def _text(elem, path: str, default: str | None = None) -> str | None:
    child = elem.find(path)
    if child is None or child.text is None:
        return default
    return child.text.strip()


def _strip_namespaces(root) -> None:
    for elem in root.iter():
        if isinstance(elem.tag, str):
            elem.tag = etree.QName(elem).localname


def _parse_floats(text: str | None, what: str) -> np.ndarray:
    if text is None:
        raise _Malformed(f"missing {what}")
    try:
        return np.array(text.replace(",", " ").split(), dtype=float)
    except ValueError as e:
        raise _Malformed(f"non-numeric value in {what}") from e


def _parse_basis(elem) -> AngleBasis:
    name = _text(elem, "AngleBasisName")
    if name is None:
        raise _Malformed("angle basis without a name")

    rings = []
    for block in elem.findall("AngleBasisBlock"):
        try:
            nphi = int(_text(block, "nPhis"))
            lower = float(_text(block, "ThetaBounds/LowerTheta"))
            upper = float(_text(block, "ThetaBounds/UpperTheta"))
            rings.append((float(lower), float(upper), nphi))
        except (TypeError, ValueError) as e:
            raise _Malformed(f"bad block in angle basis '{name}'") from e

    if not rings:
        standard = get_standard_basis(name)
        if standard is None:
            raise _Malformed(f"angle basis '{name}' has no block")
        return standard

    try:
        return AngleBasis(name, rings)
    except ValueError as e:
        raise _Malformed(f"invalid angle basis '{name}': {e}") from e


def _channel(wavelength_data) -> str | None:
    """
    Colour channel ("X", "Y" or "Z") of a WavelengthData element, or ``None``
    if it holds data outside the visible range.
    """
    wavelength = (_text(wavelength_data, "Wavelength") or "").lower()
    if wavelength.startswith("cie-"):
        channel = wavelength[4:].upper()
        return channel if channel in ("X", "Y", "Z") else None

    if wavelength == "visible":
        detector = (_text(wavelength_data, "DetectorSpectrum") or "").upper()
        for channel in ("X", "Z"):
            if f"1931 {channel}" in detector or detector.endswith(f"CIE-{channel}"):
                return channel
        return "Y"

    return None


def _chromaticity(x: np.ndarray, y: np.ndarray, z: np.ndarray) -> np.ndarray:
    total = x + y + z
    with np.errstate(divide="ignore", invalid="ignore"):
        cx = np.where(total > 0.0, x / total, 1.0 / 3.0)
        cy = np.where(total > 0.0, y / total, 1.0 / 3.0)
    return np.stack([cx, cy])


class _LayerReader:
    """Reads the optical data of one WINDOW XML layer."""

    def __init__(self, layer, bases: dict[str, AngleBasis]):
        self.layer = layer
        self.bases = bases

        structure = _text(layer, "DataDefinition/IncidentDataStructure", "Columns")
        self.structure = structure.lower()
        if self.structure not in ("columns", "rows", *_TREE_STRUCTURES):
            raise _Malformed(f"unsupported incident data structure '{structure}'")

    def _basis(self, name: str | None) -> AngleBasis:
        if name is None:
            raise _Malformed("data block without angle basis")
        basis = self.bases.get(name.lower()) or get_standard_basis(name)
        if basis is None:
            raise _Malformed(f"undefined angle basis '{name}'")
        return basis

    def _read_matrix(self, block, hemisphere: Hemisphere) -> dict[str, t.Any]:
        column_basis = self._basis(_text(block, "ColumnAngleBasis"))
        row_basis = self._basis(_text(block, "RowAngleBasis"))
        if self.structure == "rows":
            in_basis, out_basis = row_basis, column_basis
        else:
            in_basis, out_basis = column_basis, row_basis

        values = _parse_floats(_text(block, "ScatteringData"), "scattering data")
        expected = in_basis.nbins * out_basis.nbins
        if values.size != expected:
            raise _Malformed(
                f"{hemisphere.name.lower()} data has {values.size} values, "
                f"expected {expected}"
            )

        if self.structure == "rows":
            values = values.reshape(in_basis.nbins, out_basis.nbins).T
        else:
            values = values.reshape(out_basis.nbins, in_basis.nbins)

        return {"in_basis": in_basis, "out_basis": out_basis, "values": values}

    def _read_tree(self, block, hemisphere: Hemisphere):
        ndim = _TREE_STRUCTURES[self.structure]
        try:
            return parse_tree(_text(block, "ScatteringData", ""), ndim)
        except ValueError as e:
            raise _Malformed(f"{hemisphere.name.lower()} tensor tree: {e}") from e

    def read(self) -> dict[Hemisphere, dict[str, t.Any]]:
        """Collect data blocks per hemisphere and colour channel."""
        data: dict[Hemisphere, dict[str, t.Any]] = {}

        for wavelength_data in self.layer.findall("WavelengthData"):
            channel = _channel(wavelength_data)
            if channel is None:
                logger.debug(
                    "Skipping data for wavelength '%s'",
                    _text(wavelength_data, "Wavelength"),
                )
                continue

            for block in wavelength_data.findall("WavelengthDataBlock"):
                direction = (_text(block, "WavelengthDataDirection") or "").lower()
                try:
                    hemisphere = DIRECTIONS[direction]
                except KeyError as e:
                    raise _Malformed(f"unknown data direction '{direction}'") from e

                if self.structure in _TREE_STRUCTURES:
                    content = self._read_tree(block, hemisphere)
                else:
                    content = self._read_matrix(block, hemisphere)
                data.setdefault(hemisphere, {})[channel] = content

        return data

    def component(self, hemisphere: Hemisphere, channels: dict[str, t.Any]):
        if "Y" not in channels:
            raise _Malformed(f"{hemisphere.name.lower()} colour data without CIE-Y")
        in_color = "X" in channels and "Z" in channels
        sides = {"in_side": hemisphere.in_side, "out_side": hemisphere.out_side}

        if self.structure in _TREE_STRUCTURES:
            return TensorTree(
                ndim=_TREE_STRUCTURES[self.structure],
                root=channels["Y"],
                chroma=(channels["X"], channels["Z"]) if in_color else None,
                **sides,
            )

        y = channels["Y"]
        chroma = None
        if in_color:
            if any(channels[c]["values"].shape != y["values"].shape for c in "XZ"):
                raise _Malformed(f"{hemisphere.name.lower()} colour data mismatch")
            chroma = _chromaticity(
                channels["X"]["values"], y["values"], channels["Z"]["values"]
            )

        return GridMatrix(chroma=chroma, **y, **sides)


def _read_dimensions(material) -> list:
    result = []
    for tag in ("Width", "Height", "Thickness"):
        elem = material.find(tag) if material is not None else None
        if elem is None or elem.text is None or not elem.text.strip():
            result.append(0.0)
            continue
        try:
            result.append(to_quantity(float(elem.text), elem.get("unit")).m_as("m"))
        except ValueError as e:
            raise _Malformed(f"bad {tag.lower()}: {e}") from e
    return result


def load_into(
    bsdf: LoadedBSDF, path: PathLike, extract_diffuse: bool | None = None
) -> LoadedBSDF:
    """
    Fill a dataset from a WINDOW XML file.

    Parameters
    ----------
    bsdf : .LoadedBSDF
        Dataset to fill. On failure, it may be partially filled; the caller
        is responsible for releasing it.

    path : path-like
        Path to the XML file.

    extract_diffuse : bool, optional
        If ``True``, move the constant part of matrix data into the
        Lambertian baselines. Defaults to the ``EXTRACT_DIFFUSE`` setting.

    Returns
    -------
    .LoadedBSDF
        ``bsdf``, filled.

    Raises
    ------
    LoadError
        If the file cannot be read or its contents are malformed or
        unsupported.
    """
    if extract_diffuse is None:
        extract_diffuse = bool(settings.extract_diffuse)

    path = Path(path)
    try:
        root = etree.parse(str(path)).getroot()
    except OSError as e:
        raise LoadError(path, f"cannot read file ({e})") from e
    except etree.XMLSyntaxError as e:
        raise LoadError(path, f"XML syntax error ({e})") from e

    try:
        _strip_namespaces(root)
        layer = root.find("Optical/Layer")
        if layer is None:
            raise _Malformed("missing 'Optical/Layer' element")

        material = layer.find("Material")
        if material is not None:
            bsdf.manufacturer = _text(material, "Manufacturer", "")
            bsdf.product_name = _text(material, "Name", "") or _text(
                material, "ProductName", ""
            )
            bsdf.dimensions = _read_dimensions(material)

        geometry = layer.find("Geometry")
        if geometry is not None:
            bsdf.geometry = {
                "format": geometry.get("format"),
                "unit": geometry.get("unit"),
                "data": (geometry.text or "").strip(),
            }

        bases = {}
        for elem in layer.findall("DataDefinition/AngleBasis"):
            basis = _parse_basis(elem)
            bases[basis.name.lower()] = basis

        reader = _LayerReader(layer, bases)
        for hemisphere, channels in reader.read().items():
            component = reader.component(hemisphere, channels)
            if extract_diffuse and isinstance(component, GridMatrix):
                bsdf.set_lambertian(hemisphere, component.extract_diffuse())
            bsdf.set_distribution(
                hemisphere, SpectralDistribution.from_component(component)
            )
            logger.debug(
                "Loaded %s data (%s, colour: %s)",
                hemisphere.name.lower(),
                component.kind.value,
                component.has_chroma,
            )

    except _Malformed as e:
        raise LoadError(path, str(e)) from e

    return bsdf


def load(path: PathLike, name: str | None = None, **kwargs) -> LoadedBSDF:
    """
    Load a WINDOW XML file into a new dataset. Keyword arguments are
    forwarded to :func:`load_into`.

    Raises
    ------
    LoadError
        If the file cannot be loaded. The partially filled dataset is
        released before the exception propagates.
    """
    bsdf = LoadedBSDF(name=str(path) if name is None else name)
    try:
        return load_into(bsdf, path, **kwargs)
    except LoadError:
        bsdf.release()
        raise


@contextmanager
def open_bsdf(name: PathLike, resolver=None, **kwargs) -> t.Iterator[LoadedBSDF]:
    """
    Locate, load and yield a dataset; release it on exit, whatever happens.

    Parameters
    ----------
    name : path-like
        File name, resolved with ``resolver``.

    resolver : .FileResolver, optional
        File resolver used to locate the file. Defaults to
        :data:`bsdfcheck.resolver.fresolver`.

    Raises
    ------
    PathResolutionError
        If the file cannot be located.

    LoadError
        If the file cannot be loaded.
    """
    if resolver is None:
        resolver = fresolver

    path = resolver.resolve(name, strict=True)
    bsdf = LoadedBSDF(name=str(name))
    try:
        load_into(bsdf, path, **kwargs)
        yield bsdf
    finally:
        bsdf.release()
