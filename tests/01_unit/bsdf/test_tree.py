import numpy as np
import pytest

from bsdfcheck.bsdf import ColorValue, Side, TensorTree, TreeNode, parse_tree


def test_parse_tree_leaf():
    root = parse_tree("{ 0.5 }", 3)
    assert root.is_leaf
    np.testing.assert_array_equal(root.values, [0.5])

    root = parse_tree("{ 1 2 3 4 5 6 7 8 }", 3)
    assert root.is_leaf
    assert len(root.values) == 8

    # Commas are accepted as separators
    root = parse_tree("{1, 2, 3, 4, 5, 6, 7, 8}", 3)
    assert len(root.values) == 8


def test_parse_tree_nested():
    text = "{ " + " ".join("{ %d }" % i for i in range(16)) + " }"
    root = parse_tree(text, 4)
    assert not root.is_leaf
    assert len(root.children) == 16
    assert root.children[5].values[0] == 5.0


@pytest.mark.parametrize(
    "text, match",
    [
        ("", "empty"),
        ("0.5", "expected '{'"),
        ("{ 0.5", "unbalanced"),
        ("{ 1 2 }", "leaf has 2 values"),
        ("{ {1} {2} }", "2 sub-nodes"),
        ("{ 1 {2} }", "mixes"),
        ("{ abc }", "bad tensor tree value"),
        ("{ 1 } { 2 }", "trailing"),
    ],
    ids=["empty", "no_brace", "unbalanced", "leaf", "children", "mixed", "nan", "trailing"],
)
def test_parse_tree_malformed(text, match):
    with pytest.raises(ValueError, match=match):
        parse_tree(text, 3)


def test_tensor_tree_lookup():
    # Split once along each of the 3 axes: the first coordinate is the most
    # significant bit of the cell index
    tree = TensorTree(ndim=3, root=parse_tree("{ 0 1 2 3 4 5 6 7 }", 3))
    assert tree.lookup([0.1, 0.1, 0.1]) == 0.0
    assert tree.lookup([0.1, 0.1, 0.9]) == 1.0
    assert tree.lookup([0.1, 0.9, 0.1]) == 2.0
    assert tree.lookup([0.9, 0.1, 0.1]) == 4.0
    assert tree.lookup([0.9, 0.9, 0.9]) == 7.0

    # Coordinates are clamped
    assert tree.lookup([1.0, 1.0, 1.0]) == 7.0
    assert tree.lookup([-1.0, -1.0, -1.0]) == 0.0

    with pytest.raises(ValueError, match="3 coordinates"):
        tree.lookup([0.5, 0.5])


def test_tensor_tree_evaluate():
    tree = TensorTree(
        ndim=3,
        root=TreeNode(values=np.array([2.0])),
        in_side=Side.FRONT,
        out_side=Side.BACK,
    )
    assert tree.kind.value == "tensor_tree"
    assert not tree.has_chroma

    value = tree.evaluate(np.array([0, 0, 1.0]), np.array([0, 0, -1.0]))
    assert value == ColorValue(2.0)

    tree = TensorTree(
        ndim=4,
        root=TreeNode(values=np.array([1.0])),
        chroma=(TreeNode(values=np.array([1.0])), TreeNode(values=np.array([1.0]))),
    )
    assert tree.has_chroma
    value = tree.evaluate(np.array([0.6, 0, 0.8]), np.array([-0.6, 0, 0.8]))
    assert np.isclose(value.cie_y, 1.0)
    assert np.isclose(value.cx, 1.0 / 3.0)


def test_tensor_tree_specular_transmission():
    # Specular transmission maps incident and exitant directions to the same
    # square coordinates
    tree = TensorTree(ndim=4, root=TreeNode(values=np.array([0.0])))
    in_dir = np.array([0.3, 0.4, np.sqrt(0.75)])
    coords = tree.grid_coords(in_dir, -in_dir)
    np.testing.assert_allclose(coords[:2], coords[2:])


def test_tensor_tree_hemispherical_extrema():
    tree = TensorTree(ndim=3, root=TreeNode(values=np.array([1.0 / np.pi])))
    max_hemi, min_proj_sa = tree.hemispherical_extrema()
    assert np.isclose(max_hemi, 1.0)
    assert np.isclose(min_proj_sa, np.pi)

    # Finer cells resolve narrower peaks
    tree = TensorTree(ndim=3, root=parse_tree("{ 1 1 1 1 1 1 1 1 }", 3))
    _, min_proj_sa = tree.hemispherical_extrema()
    assert np.isclose(min_proj_sa, np.pi / 4)
