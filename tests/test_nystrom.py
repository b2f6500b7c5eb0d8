"""Tests for the Nystrom feature map."""

import pytest
import jax.numpy as jnp
import numpy as np

from gramkit.kernels.base import ApproximateKernel
from gramkit.kernels.nystrom import EigenDecomposition, NystromFeatureMap, nystrom_features
from gramkit.matrix.dense import build_kernel_matrix


def product_kernel(a, b):
    return a * b


def test_features_by_hand():
    """phi(x)_i = sum_k k(p_k, x) V[k, i] / sqrt(lambda_i)."""
    decomposition = EigenDecomposition(jnp.array([4.0, 1.0]), jnp.eye(2))

    phi = nystrom_features(decomposition, [1.0, 2.0], 3.0, product_kernel)

    # kernel row [3, 6], divided by [2, 1]
    assert jnp.allclose(phi, jnp.array([1.5, 6.0]))


def test_rectangular_eigenvectors():
    """m prototypes, d < m eigenpairs."""
    V = jnp.array([[1.0], [0.0], [0.0]])
    phi_map = NystromFeatureMap(EigenDecomposition(jnp.array([9.0]), V), [1.0, 2.0, 3.0], product_kernel)

    assert phi_map.n_features == 1
    assert jnp.allclose(phi_map(6.0), jnp.array([2.0]))


def test_reconstructs_kernel_on_prototypes(rbf_kernel):
    """With all eigenpairs, phi(p_k) . phi(p_l) equals K[k, l]."""
    prototypes = np.array([[0.0, 0.0], [1.0, 0.5], [2.0, -1.0], [-1.5, 1.0], [0.5, 2.5]])
    K = build_kernel_matrix(prototypes, len(prototypes), rbf_kernel.evaluate).matrix
    eigenvalues, eigenvectors = jnp.linalg.eigh(K)
    assert jnp.all(eigenvalues > 0)

    phi_map = rbf_kernel.feature_mapping(EigenDecomposition(eigenvalues, eigenvectors), prototypes)
    features = phi_map.feature_map(prototypes)

    assert features.shape == (5, 5)
    assert jnp.allclose(features @ features.T, K, atol=1e-4)
    assert jnp.allclose(phi_map.approximate_kernel(prototypes, prototypes), K, atol=1e-4)


def test_from_prototypes_orders_and_truncates(rbf_kernel, sample_points):
    X, _ = sample_points
    full = NystromFeatureMap.from_prototypes(X, rbf_kernel.evaluate)
    reduced = NystromFeatureMap.from_prototypes(X, rbf_kernel.evaluate, rank=3)

    eigenvalues = full.decomposition.eigenvalues
    assert jnp.all(eigenvalues[:-1] >= eigenvalues[1:])
    assert reduced.n_features == 3
    assert jnp.allclose(reduced.decomposition.eigenvalues, eigenvalues[:3])
    assert reduced.feature_map(X).shape == (X.shape[0], 3)


def test_from_prototypes_warns_on_dropped_eigenpairs():
    """Duplicated prototypes make the kernel matrix singular."""
    with pytest.warns(UserWarning, match="Dropping"):
        phi_map = NystromFeatureMap.from_prototypes(
            [1.0, 1.0, 2.0], product_kernel, min_eigenvalue=1e-3
        )
    assert phi_map.n_features == 1


def test_is_approximate_kernel(rbf_kernel):
    phi_map = NystromFeatureMap.from_prototypes([0.0, 1.0], rbf_kernel.evaluate)
    assert isinstance(phi_map, ApproximateKernel)
    assert phi_map.feature_map([]).shape == (0, 2)


@pytest.mark.parametrize("eigenvalues", [[1.0, 0.0], [1.0, -2.0], [float("nan"), 1.0]])
def test_rejects_invalid_eigenvalues(eigenvalues):
    decomposition = EigenDecomposition(jnp.array(eigenvalues), jnp.eye(2))
    with pytest.raises(ValueError, match="eigenvalues"):
        NystromFeatureMap(decomposition, [1.0, 2.0], product_kernel)


def test_rejects_mismatched_eigenvectors():
    decomposition = EigenDecomposition(jnp.array([1.0, 2.0]), jnp.eye(3))
    with pytest.raises(ValueError, match="shape"):
        NystromFeatureMap(decomposition, [1.0, 2.0, 3.0], product_kernel)


def test_rejects_bad_rank():
    with pytest.raises(ValueError, match="rank"):
        NystromFeatureMap.from_prototypes([1.0, 2.0], product_kernel, rank=0)
