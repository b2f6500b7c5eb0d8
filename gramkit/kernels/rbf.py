"""Radial Basis Function (RBF) kernel implementation."""

import jax.numpy as jnp
import numpy as np
from jax import jit
from functools import partial
from typing import Sequence, TYPE_CHECKING
from jaxtyping import Array, Float

from ..matrix.dense import KernelMatrix, build_kernel_matrix, cross_kernel_matrix
from .nystrom import EigenDecomposition, NystromFeatureMap

if TYPE_CHECKING:
    from .base import Kernel


class RBFKernel:
    """
    Radial Basis Function (Gaussian) kernel.

    k(x, y) = exp(-||x - y||² / (2σ²))

    Parameters:
        sigma: Bandwidth parameter (length scale)
    """

    def __init__(self, sigma: float = 1.0):
        if sigma <= 0:
            raise ValueError("sigma must be positive")
        self._sigma = sigma

    @property
    def sigma(self) -> float:
        """Kernel bandwidth parameter."""
        return self._sigma

    def evaluate(self, x, y) -> float:
        """
        Kernel value for one pair of points.

        This is the pairwise evaluator handed to the matrix builders.
        Points may be scalars or vectors of equal length.
        """
        diff = np.asarray(x, dtype=np.float64) - np.asarray(y, dtype=np.float64)
        return float(np.exp(-np.sum(diff ** 2) / (2 * self._sigma ** 2)))

    @partial(jit, static_argnums=(0,))
    def __call__(
        self,
        X: Float[Array, "n d"],
        Y: Float[Array, "m d"]
    ) -> Float[Array, "n m"]:
        """
        Compute RBF kernel matrix.

        Uses the identity:
        ||x - y||² = ||x||² + ||y||² - 2<x, y>

        Parameters:
            X: First set of points, shape (n, d)
            Y: Second set of points, shape (m, d)

        Returns:
            Kernel matrix of shape (n, m)
        """
        X_sqnorm = jnp.sum(X ** 2, axis=1, keepdims=True)  # (n, 1)
        Y_sqnorm = jnp.sum(Y ** 2, axis=1, keepdims=True)  # (m, 1)

        # Clamp tiny negative distances from cancellation
        sq_distances = jnp.maximum(X_sqnorm + Y_sqnorm.T - 2 * jnp.dot(X, Y.T), 0.0)

        return jnp.exp(-sq_distances / (2 * self._sigma ** 2))

    def gram(self, data: Sequence) -> KernelMatrix:
        """Exactly symmetric kernel matrix over `data`, built pairwise."""
        return build_kernel_matrix(data, len(data), self.evaluate)

    def cross(self, data1: Sequence, data2: Sequence) -> Float[Array, "n1 n2"]:
        """Kernel matrix between two datasets, built pairwise."""
        return cross_kernel_matrix(data1, data2, self.evaluate)

    def feature_mapping(
        self,
        decomposition: EigenDecomposition,
        prototypes: Sequence
    ) -> NystromFeatureMap:
        """
        Nystrom feature map for this kernel.

        Parameters:
            decomposition: Eigendecomposition of this kernel's matrix over
                `prototypes`
            prototypes: Prototype points

        Returns:
            NystromFeatureMap evaluating this kernel
        """
        return NystromFeatureMap(decomposition, prototypes, self.evaluate)
