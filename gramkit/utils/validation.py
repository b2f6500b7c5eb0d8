"""Input validation shared by the kernel matrix builders."""

from typing import Sequence, Tuple

import jax.numpy as jnp


def check_positive_int(value: int, name: str) -> int:
    """
    Validate a strictly positive integer parameter (block sizes, ranks).

    Parameters:
        value: Value to check
        name: Parameter name used in the error message

    Returns:
        The value, unchanged
    """
    if value is None or int(value) != value or value <= 0:
        raise ValueError(f"{name} must be a positive integer, got {value!r}")
    return int(value)


def check_length(data: Sequence, length: int) -> int:
    """
    Check that a declared dataset length agrees with the data.

    A mismatch means some index pair cannot be looked up, which is
    caller misuse rather than a runtime condition.
    """
    actual = len(data)
    if length != actual:
        raise IndexError(
            f"Declared length {length} does not match dataset size {actual}"
        )
    return actual


def check_eigendecomposition(decomposition, n_prototypes: int) -> Tuple[int, int]:
    """
    Validate an eigendecomposition against a prototype set.

    Eigenvalues must be finite and strictly positive, and the eigenvector
    matrix must have one row per prototype and one column per eigenvalue.

    Parameters:
        decomposition: (eigenvalues, eigenvectors) pair
        n_prototypes: Number of prototypes m

    Returns:
        (m, d) shape of the eigenvector matrix
    """
    eigenvalues, eigenvectors = decomposition
    eigenvalues = jnp.asarray(eigenvalues)
    eigenvectors = jnp.asarray(eigenvectors)

    if eigenvalues.ndim != 1:
        raise ValueError("eigenvalues must be one-dimensional")
    if eigenvectors.ndim != 2:
        raise ValueError("eigenvectors must be a matrix")

    d = eigenvalues.shape[0]
    expected = (n_prototypes, d)
    if eigenvectors.shape != expected:
        raise ValueError(
            f"eigenvectors must have shape {expected} "
            f"(prototypes x eigenvalues), got {eigenvectors.shape}"
        )

    if not bool(jnp.all(jnp.isfinite(eigenvalues))):
        raise ValueError("eigenvalues must be finite")
    if not bool(jnp.all(eigenvalues > 0)):
        raise ValueError(
            "eigenvalues must be strictly positive; "
            "filter non-positive eigenpairs before building a feature map"
        )
    return expected
