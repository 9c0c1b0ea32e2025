import numpy as np
import pytest

from bsdfcheck.analysis import (
    ReciprocityStats,
    check_reciprocity,
    classify,
    format_reciprocity,
    relative_error,
)
from bsdfcheck.bsdf import KLEMS_QUARTER, ColorValue, Hemisphere, LoadedBSDF
from bsdfcheck.exceptions import EvaluationError
from bsdfcheck.test_tools import make_grid_bsdf, make_tree_bsdf, ring_basis

FORWARD = np.array([[1.0, 0.5], [0.2, 0.8]])
REVERSE = np.array([[1.0, 0.45], [0.25, 0.8]])


def reverse_lookup(basis, table):
    """
    Build an evaluator returning ``table[o, i]`` when called with the
    directions of the (incident i, exitant o) pair swapped.
    """

    def evaluator(out_dir, in_dir, bsdf):
        i = basis.index(out_dir)
        o = basis.index(in_dir)
        return ColorValue(table[o, i])

    return evaluator


def test_stats():
    stats = ReciprocityStats()
    assert not stats.has_data
    assert stats.mean == 0.0

    for e in (10.0, 0.0, 25.0, 0.0):
        stats.add(e)
    assert stats.count == 4
    assert stats.min == 0.0
    assert stats.max == 25.0
    assert np.isclose(stats.mean, 8.75)


def test_format_reciprocity():
    stats = ReciprocityStats(count=3, min=0.0, max=25.0, sum=30.0)
    assert format_reciprocity("Front Refl", stats) == "Front Refl\t0.0\t10.0\t25.0"

    # Mean never leaves [min, max]
    stats = ReciprocityStats(count=2, min=5.0, max=5.0, sum=10.000000001)
    assert stats.mean == 5.0

    assert format_reciprocity("Transmission", ReciprocityStats()) == "Transmission\t0\t0\t0"


def test_relative_error():
    assert np.isclose(relative_error(0.5, 0.45), 10.0)
    assert np.isclose(relative_error(0.2, 0.25), 25.0)
    assert relative_error(1.0, 1.0) == 0.0


def test_reflection_errors():
    basis = ring_basis(2)
    bsdf = make_grid_bsdf(FORWARD, basis=basis, hemispheres=[Hemisphere.FRONT_REFLECTION])
    bsdf_type = classify(bsdf)
    evaluator = reverse_lookup(basis, REVERSE)

    stats = check_reciprocity(bsdf, 1, 1, bsdf_type, evaluator=evaluator)
    assert stats.count == 4
    assert np.isclose(stats.min, 0.0)
    assert np.isclose(stats.mean, 8.75)
    assert np.isclose(stats.max, 25.0)

    # Forward values at or below the threshold are skipped
    stats = check_reciprocity(bsdf, 1, 1, bsdf_type, threshold=0.2, evaluator=evaluator)
    assert stats.count == 3
    assert np.isclose(stats.max, 10.0)

    # ... and values just above it are tested
    stats = check_reciprocity(
        bsdf, 1, 1, bsdf_type, threshold=0.2 - 1e-9, evaluator=evaluator
    )
    assert stats.count == 4

    # No back reflection data
    stats = check_reciprocity(bsdf, -1, -1, bsdf_type, evaluator=evaluator)
    assert not stats.has_data
    assert format_reciprocity("Back Refl", stats) == "Back Refl\t0\t0\t0"


def test_reciprocal_dataset():
    # With the default evaluator, a symmetric matrix is reciprocal
    bsdf = make_grid_bsdf(basis=KLEMS_QUARTER)
    bsdf_type = classify(bsdf)

    for side1, side2 in [(1, 1), (-1, -1), (-1, 1)]:
        stats = check_reciprocity(bsdf, side1, side2, bsdf_type)
        assert stats.count == KLEMS_QUARTER.nbins**2
        assert np.isclose(stats.max, 0.0)


def test_non_reciprocal_dataset():
    values = np.array([[1.0, 0.5], [0.2, 0.8]])
    bsdf = make_grid_bsdf(
        values, basis=ring_basis(2), hemispheres=[Hemisphere.BACK_REFLECTION]
    )
    stats = check_reciprocity(bsdf, -1, -1, classify(bsdf))
    # 0.5 vs 0.2 and the other way round
    assert np.isclose(stats.max, 150.0)
    assert np.isclose(stats.min, 0.0)


def test_transmission_requires_both_sides():
    basis = ring_basis(2)
    bsdf = make_grid_bsdf(
        FORWARD, basis=basis, hemispheres=[Hemisphere.FRONT_TRANSMISSION]
    )

    def fail(out_dir, in_dir, bsdf):
        raise AssertionError("evaluator must not be called")

    stats = check_reciprocity(bsdf, -1, 1, classify(bsdf), evaluator=fail)
    assert not stats.has_data


def test_transmission_directions():
    basis = ring_basis(2)
    bsdf = make_grid_bsdf(
        FORWARD,
        basis=basis,
        hemispheres=[Hemisphere.FRONT_TRANSMISSION, Hemisphere.BACK_TRANSMISSION],
    )
    calls = []

    def evaluator(out_dir, in_dir, bsdf):
        calls.append((out_dir, in_dir))
        return ColorValue(1.0)

    check_reciprocity(bsdf, -1, 1, classify(bsdf), evaluator=evaluator)

    # Front transmission data is sampled: reverse evaluations exit toward
    # the front and come from the back
    assert len(calls) == 4
    for out_dir, in_dir in calls:
        assert out_dir[2] > 0.0
        assert in_dir[2] < 0.0


def test_tensor_tree_has_no_data():
    bsdf = make_tree_bsdf(
        ndim=3,
        hemispheres=[
            Hemisphere.FRONT_REFLECTION,
            Hemisphere.FRONT_TRANSMISSION,
            Hemisphere.BACK_TRANSMISSION,
        ],
    )
    bsdf_type = classify(bsdf)
    for side1, side2 in [(1, 1), (-1, 1)]:
        assert not check_reciprocity(bsdf, side1, side2, bsdf_type).has_data


def test_mixed_representations():
    # Back transmission drives classification; front reflection is a tree
    bsdf = make_grid_bsdf(
        FORWARD, basis=ring_basis(2), hemispheres=[Hemisphere.BACK_TRANSMISSION]
    )
    tree = make_tree_bsdf(ndim=4, hemispheres=[Hemisphere.FRONT_REFLECTION])
    bsdf.front_reflection = tree.front_reflection
    bsdf_type = classify(bsdf)
    assert bsdf_type.is_matrix

    stats = check_reciprocity(bsdf, 1, 1, bsdf_type)
    assert not stats.has_data
    assert format_reciprocity("Front Refl", stats) == "Front Refl\t0\t0\t0"


def test_lambertian_has_no_data():
    bsdf = LoadedBSDF()
    assert not check_reciprocity(bsdf, 1, 1, classify(bsdf)).has_data


def test_evaluation_failure_propagates():
    basis = ring_basis(2)
    bsdf = make_grid_bsdf(FORWARD, basis=basis, hemispheres=[Hemisphere.FRONT_REFLECTION])

    def fail(out_dir, in_dir, bsdf):
        raise EvaluationError("no data")

    with pytest.raises(EvaluationError):
        check_reciprocity(bsdf, 1, 1, classify(bsdf), evaluator=fail)
