"""Tensor tree component."""

from __future__ import annotations

import logging
import math
import re
import typing as t

import attrs
import numpy as np

from ._core import ColorValue, Component, ComponentKind, Side
from ..attrs import define, documented
from ..frame import disk_to_square

logger = logging.getLogger(__name__)

_TOKEN_RE = re.compile(r"[{}]|[^\s{},]+")


@attrs.define(eq=False)
class TreeNode:
    """
    Tensor tree node. A node either holds leaf values (one value for a
    uniform cell, or ``2**ndim`` values for a cell split once more) or
    ``2**ndim`` children.
    """

    values: np.ndarray | None = attrs.field(default=None)
    children: list[TreeNode] | None = attrs.field(default=None)

    @property
    def is_leaf(self) -> bool:
        return self.children is None


def _child_index(coords: list[float]) -> tuple[int, list[float]]:
    # The first coordinate is the most significant bit of the child index
    index = 0
    scaled = []
    for x in coords:
        upper = x >= 0.5
        index = (index << 1) | int(upper)
        scaled.append(2.0 * x - 1.0 if upper else 2.0 * x)
    return index, scaled


def parse_tree(text: str, ndim: int) -> TreeNode:
    """
    Parse a tensor tree written in nested-brace notation.

    Each ``{ ... }`` block is a node. A block made of numbers only is a leaf
    and must hold either a single value or ``2**ndim`` values; any other
    block must hold exactly ``2**ndim`` sub-blocks.

    Parameters
    ----------
    text : str
        Tree data.

    ndim : int
        Tree dimensionality (3 or 4).

    Returns
    -------
    .TreeNode
        Root node.

    Raises
    ------
    ValueError
        If the text is not a well-formed tree.
    """
    nchildren = 1 << ndim
    tokens = _TOKEN_RE.findall(text)
    if not tokens:
        raise ValueError("empty tensor tree data")

    pos = 0

    def parse_node() -> TreeNode:
        nonlocal pos
        if pos >= len(tokens) or tokens[pos] != "{":
            raise ValueError(f"expected '{{' at token {pos}")
        pos += 1

        children = []
        values = []
        while pos < len(tokens) and tokens[pos] != "}":
            if tokens[pos] == "{":
                children.append(parse_node())
            else:
                try:
                    values.append(float(tokens[pos]))
                except ValueError as e:
                    raise ValueError(f"bad tensor tree value '{tokens[pos]}'") from e
                pos += 1

        if pos >= len(tokens):
            raise ValueError("unbalanced braces in tensor tree data")
        pos += 1

        if children and values:
            raise ValueError("tensor tree node mixes values and sub-nodes")
        if children:
            if len(children) != nchildren:
                raise ValueError(
                    f"tensor tree node has {len(children)} sub-nodes, "
                    f"expected {nchildren}"
                )
            return TreeNode(children=children)
        if len(values) not in (1, nchildren):
            raise ValueError(
                f"tensor tree leaf has {len(values)} values, "
                f"expected 1 or {nchildren}"
            )
        return TreeNode(values=np.asarray(values))

    root = parse_node()
    if pos != len(tokens):
        raise ValueError("trailing data after tensor tree")
    return root


@define(eq=False)
class TensorTree(Component):
    """
    Tensor tree BSDF component. Trees are 4-dimensional (anisotropic) or
    3-dimensional (isotropic, the incident azimuth being implied).
    """

    kind: t.ClassVar[ComponentKind] = ComponentKind.TENSOR_TREE

    ndim: int = documented(
        attrs.field(converter=int),
        doc="Tree dimensionality.",
        type="int",
    )

    root: TreeNode = documented(
        attrs.field(validator=attrs.validators.instance_of(TreeNode)),
        doc="Root node holding CIE Y BSDF values.",
        type=".TreeNode",
    )

    in_side: Side = attrs.field(default=Side.FRONT, converter=Side)
    out_side: Side = attrs.field(default=Side.FRONT, converter=Side)

    chroma: tuple[TreeNode, TreeNode] | None = documented(
        attrs.field(default=None),
        doc="Trees holding CIE X and CIE Z values, or ``None`` for "
        "luminance-only data.",
        type="tuple of .TreeNode or None",
        default="None",
    )

    @property
    def has_chroma(self) -> bool:
        return self.chroma is not None

    @staticmethod
    def _lookup(node: TreeNode, coords: list[float]) -> float:
        while not node.is_leaf:
            index, coords = _child_index(coords)
            node = node.children[index]

        if len(node.values) == 1:
            return float(node.values[0])
        index, _ = _child_index(coords)
        return float(node.values[index])

    def lookup(self, coords: t.Sequence[float]) -> float:
        """
        Value of the leaf cell containing grid coordinates ``coords`` in
        [0, 1)^ndim.
        """
        if len(coords) != self.ndim:
            raise ValueError(f"expected {self.ndim} coordinates, got {len(coords)}")
        return self._lookup(self.root, [min(max(x, 0.0), 1.0 - 1e-9) for x in coords])

    def grid_coords(self, in_dir: np.ndarray, out_dir: np.ndarray) -> list[float]:
        """
        Grid coordinates of a direction pair. Incident directions are mapped
        to the square with their projection negated, so that specular
        transmission lands on matching coordinates.
        """
        if self.ndim == 3:
            r_in = math.hypot(in_dir[0], in_dir[1])
            # Rotate the exitant direction so that the incident one lies at -x
            if r_in > 0.0:
                cos_a, sin_a = -in_dir[0] / r_in, -in_dir[1] / r_in
            else:
                cos_a, sin_a = 1.0, 0.0
            ox = out_dir[0] * cos_a + out_dir[1] * sin_a
            oy = -out_dir[0] * sin_a + out_dir[1] * cos_a
            return [0.5 - 0.5 * r_in, *disk_to_square(ox, oy)]

        return [*disk_to_square(-in_dir[0], -in_dir[1]), *disk_to_square(*out_dir[:2])]

    def evaluate(self, in_dir: np.ndarray, out_dir: np.ndarray) -> ColorValue | None:
        if self.ndim not in (3, 4):
            return None

        coords = self.grid_coords(in_dir, out_dir)
        y = self._lookup(self.root, list(coords))
        if self.chroma is None:
            return ColorValue(y)

        x = self._lookup(self.chroma[0], list(coords))
        z = self._lookup(self.chroma[1], list(coords))
        return ColorValue.from_xyz(x, y, z)

    def _walk(self, node, origin, size, cells):
        # Collect (origin, size, value) for every leaf cell of the tree
        if node.is_leaf:
            if len(node.values) == 1:
                cells.append((origin, size, float(node.values[0])))
                return
            half = 0.5 * size
            for index, value in enumerate(node.values):
                cells.append((self._sub_origin(origin, half, index), half, float(value)))
            return

        half = 0.5 * size
        for index, child in enumerate(node.children):
            self._walk(child, self._sub_origin(origin, half, index), half, cells)

    def _sub_origin(self, origin, half, index):
        return tuple(
            origin[d] + half * ((index >> (self.ndim - 1 - d)) & 1)
            for d in range(self.ndim)
        )

    def hemispherical_extrema(self) -> tuple[float, float]:
        if self.ndim not in (3, 4):
            return 0.0, math.pi

        cells = []
        self._walk(self.root, (0.0,) * self.ndim, 1.0, cells)
        n_in = self.ndim - 2

        # Exitant coordinates are the last two; the projected solid angle of
        # a cell is π times its area in the unit square
        min_proj_sa = min(math.pi * size * size for _, size, _ in cells)

        # Integrate over exitant cells at the finest incident resolution
        finest = min(size for _, size, _ in cells)
        nsteps = max(1, int(round(1.0 / finest)))
        hemi = {}
        for origin, size, value in cells:
            first = [int(round(origin[d] / finest)) for d in range(n_in)]
            count = max(1, int(round(size / finest)))
            for offset in np.ndindex(*(count,) * n_in):
                key = tuple(f + o for f, o in zip(first, offset))
                hemi[key] = hemi.get(key, 0.0) + math.pi * size * size * value

        max_hemi = max(hemi.values()) if hemi else 0.0
        logger.debug(
            "Tensor tree: %d leaf cells, %d incident samples", len(cells), nsteps**n_in
        )
        return max_hemi, min_proj_sa
