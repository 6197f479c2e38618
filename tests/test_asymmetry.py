import numpy as np

from scprojection.analysis import centroid_distance, reference_asymmetry
from scprojection.data import make_ellipsoid_pair


def test_shift_orthogonal_to_reference_axes_is_removed():
    X, labels = make_ellipsoid_pair(shift=5.0, random_state=1)

    result = reference_asymmetry(X, labels, 2, "A", "B")

    assert centroid_distance(X.T, labels) > 4.0
    assert centroid_distance(result.first.cell_embeddings(), labels) < 1e-8
    # A's basis spans its two longest axes, x and y
    np.testing.assert_allclose(
        np.abs(result.first.basis.rotation[:2]), np.eye(2), atol=0.1
    )


def test_swapping_reference_changes_embedding():
    X, labels = make_ellipsoid_pair(shift=5.0, random_state=1)

    result = reference_asymmetry(X, labels, 2, "A", "B")

    assert result.first.reference_condition == "A"
    assert result.second.reference_condition == "B"
    assert result.max_abs_difference > 1e-6
    assert result.disparity > 1e-10


def test_asymmetry_with_different_long_axes():
    # B is elongated along z instead of y
    X, labels = make_ellipsoid_pair(axes=(10.0, 4.0, 1.0), axes_b=(10.0, 1.0, 4.0), random_state=2)

    result = reference_asymmetry(X, labels, 2, "A", "B")

    # no rotation, reflection or scaling maps one embedding onto the other
    assert result.disparity > 0.05

    # each reference keeps its own spread and squashes the other condition
    first = result.first.cell_embeddings()
    second = result.second.cell_embeddings()
    a, b = labels == "A", labels == "B"
    assert first[a, 1].std() > 3 * first[b, 1].std()
    assert second[b, 1].std() > 3 * second[a, 1].std()
