"""Nystrom approximation of a kernel's feature map."""

import logging
import warnings
from typing import Callable, NamedTuple, Optional, Sequence, TypeVar

import jax.numpy as jnp
from jaxtyping import Array, Float

from ..matrix.dense import build_kernel_matrix
from ..utils.validation import check_eigendecomposition, check_positive_int

logger = logging.getLogger(__name__)

T = TypeVar("T")


class EigenDecomposition(NamedTuple):
    """Eigenpairs of a prototype kernel matrix."""
    eigenvalues: Float[Array, "d"]
    eigenvectors: Float[Array, "m d"]  # One column per eigenvalue


def nystrom_features(
    decomposition: EigenDecomposition,
    prototypes: Sequence[T],
    x: T,
    evaluate: Callable[[T, T], float]
) -> Float[Array, "d"]:
    """
    Nystrom feature vector of a single point.

    phi_i(x) = (1 / sqrt(lambda_i)) * sum_k k(p_k, x) * V[k, i]

    No validation happens here; eigenvalues <= 0 give non-finite output.
    Use NystromFeatureMap for a checked version.

    Parameters:
        decomposition: (eigenvalues, eigenvectors) of the prototype kernel matrix
        prototypes: Prototype points p_1..p_m
        x: Query point
        evaluate: Kernel function used to build the decomposition

    Returns:
        Feature vector of length d
    """
    eigenvalues, eigenvectors = decomposition
    kernel_row = jnp.array([evaluate(p, x) for p in prototypes])
    projection = kernel_row @ jnp.asarray(eigenvectors)
    return projection / jnp.sqrt(jnp.asarray(eigenvalues))


class NystromFeatureMap:
    """
    Finite-dimensional feature map from a sampled kernel matrix.

    Approximates: k(x, y) ≈ φ(x)ᵀφ(y)

    Given the eigendecomposition K_P = V diag(λ) Vᵀ of the kernel matrix
    over a prototype set P, each point is projected onto the eigenvectors
    through its kernel row against P. With P equal to the data and all
    eigenpairs kept, φ(p_k)ᵀφ(p_l) reproduces K[k, l].

    Reference:
        Williams & Seeger (2001). "Using the Nyström Method to Speed Up
        Kernel Machines"

    Parameters:
        decomposition: EigenDecomposition of the prototype kernel matrix;
            eigenvalues must be strictly positive
        prototypes: Prototype points, one per eigenvector row
        evaluate: Pairwise kernel function
    """

    def __init__(
        self,
        decomposition: EigenDecomposition,
        prototypes: Sequence[T],
        evaluate: Callable[[T, T], float]
    ):
        check_eigendecomposition(decomposition, len(prototypes))
        eigenvalues, eigenvectors = decomposition
        self._decomposition = EigenDecomposition(
            jnp.asarray(eigenvalues), jnp.asarray(eigenvectors)
        )
        self._prototypes = prototypes
        self._evaluate = evaluate

    @classmethod
    def from_prototypes(
        cls,
        prototypes: Sequence[T],
        evaluate: Callable[[T, T], float],
        rank: Optional[int] = None,
        min_eigenvalue: float = 1e-10
    ) -> "NystromFeatureMap":
        """
        Decompose the prototype kernel matrix and build the feature map.

        Keeps the `rank` largest eigenpairs whose eigenvalue exceeds
        `min_eigenvalue` (all of them when rank is None).

        Parameters:
            prototypes: Prototype points
            evaluate: Symmetric pairwise kernel function
            rank: Maximum feature dimension
            min_eigenvalue: Eigenpairs at or below this value are dropped

        Returns:
            NystromFeatureMap
        """
        if rank is not None:
            rank = check_positive_int(rank, "rank")

        kernel = build_kernel_matrix(prototypes, len(prototypes), evaluate)
        eigenvalues, eigenvectors = jnp.linalg.eigh(kernel.matrix)

        # eigh returns ascending order
        order = jnp.argsort(eigenvalues)[::-1]
        eigenvalues = eigenvalues[order]
        eigenvectors = eigenvectors[:, order]

        keep = eigenvalues > min_eigenvalue
        n_dropped = int(jnp.sum(~keep))
        if n_dropped > 0:
            warnings.warn(
                f"Dropping {n_dropped} eigenpairs with eigenvalue <= {min_eigenvalue}"
            )
        eigenvalues = eigenvalues[keep]
        eigenvectors = eigenvectors[:, keep]

        if rank is not None:
            eigenvalues = eigenvalues[:rank]
            eigenvectors = eigenvectors[:, :rank]

        logger.info(
            f"Nystrom feature map: {len(prototypes)} prototypes, "
            f"{eigenvalues.shape[0]} features"
        )
        return cls(EigenDecomposition(eigenvalues, eigenvectors), prototypes, evaluate)

    @property
    def decomposition(self) -> EigenDecomposition:
        return self._decomposition

    @property
    def prototypes(self) -> Sequence[T]:
        return self._prototypes

    @property
    def n_features(self) -> int:
        """Feature dimension d (number of eigenpairs)."""
        return self._decomposition.eigenvalues.shape[0]

    def __call__(self, x: T) -> Float[Array, "d"]:
        """Feature vector of a single point."""
        return nystrom_features(self._decomposition, self._prototypes, x, self._evaluate)

    def feature_map(self, X: Sequence[T]) -> Float[Array, "n d"]:
        """
        Feature vectors of a batch of points.

        Parameters:
            X: Points to map

        Returns:
            Feature map of shape (n, d)
        """
        if len(X) == 0:
            return jnp.zeros((0, self.n_features))
        return jnp.stack([self(x) for x in X])

    def approximate_kernel(
        self,
        X: Sequence[T],
        Y: Sequence[T]
    ) -> Float[Array, "n m"]:
        """
        Approximate kernel matrix via the feature map.

        K(X, Y) ≈ φ(X) @ φ(Y).T
        """
        return jnp.dot(self.feature_map(X), self.feature_map(Y).T)
