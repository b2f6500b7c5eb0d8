"""Dense kernel matrix construction."""

import logging
from dataclasses import dataclass
from typing import Callable, Sequence, Tuple, TypeVar

import jax.numpy as jnp
import numpy as np
from jaxtyping import Array, Float

from .combine import combine
from ..utils.validation import check_length

logger = logging.getLogger(__name__)

T = TypeVar("T")
Evaluator = Callable[[T, T], float]


@dataclass(frozen=True)
class KernelMatrix:
    """
    Symmetric kernel (Gram) matrix over a single dataset.

    Attributes:
        matrix: Kernel values, shape (size, size)
        size: Number of data points
    """
    matrix: Float[Array, "n n"]
    size: int

    @property
    def shape(self) -> Tuple[int, int]:
        return tuple(self.matrix.shape)

    def diagonal(self) -> Float[Array, "n"]:
        """Self-similarities k(x_i, x_i)."""
        return jnp.diag(self.matrix)


def build_kernel_matrix(
    data: Sequence[T],
    length: int,
    evaluate: Evaluator
) -> KernelMatrix:
    """
    Build the symmetric kernel matrix K[i, j] = evaluate(data[i], data[j]).

    The evaluator is called once per lower-triangular pair (i >= j), so
    n(n+1)/2 times in total. Upper-triangular entries are filled from the
    same stored value, which makes K exactly symmetric even when the
    evaluator is not bitwise symmetric in floating point.

    Values are accumulated in float64 and converted to JAX's default float
    dtype, which is float32 unless `jax_enable_x64` is set.

    Parameters:
        data: Dataset of n points
        length: Declared number of points, must equal len(data)
        evaluate: Symmetric pairwise kernel function

    Returns:
        KernelMatrix of shape (n, n)
    """
    check_length(data, length)

    kernel_index = {
        (i, j): evaluate(a, b)
        for (i, a), (j, b) in combine(data, symmetric=True)
    }
    logger.debug(f"Evaluated {len(kernel_index)} unique kernel entries")

    buffer = np.empty((length, length), dtype=np.float64)
    for i in range(length):
        for j in range(length):
            buffer[i, j] = kernel_index[(i, j)] if i >= j else kernel_index[(j, i)]

    kernel = jnp.asarray(buffer)
    logger.info(f"   Dimensions: {kernel.shape[0]} x {kernel.shape[1]}")
    return KernelMatrix(matrix=kernel, size=length)


def cross_kernel_matrix(
    data1: Sequence[T],
    data2: Sequence[T],
    evaluate: Evaluator
) -> Float[Array, "n1 n2"]:
    """
    Build the rectangular kernel matrix M[i, j] = evaluate(data1[i], data2[j]).

    Every pair is evaluated independently (n1 * n2 calls); no symmetry is
    assumed between the two datasets. Values are returned in JAX's default
    float dtype (float32 unless `jax_enable_x64` is set).

    Parameters:
        data1: Row dataset of n1 points
        data2: Column dataset of n2 points
        evaluate: Pairwise kernel function

    Returns:
        Kernel matrix of shape (n1, n2)
    """
    n1, n2 = len(data1), len(data2)
    buffer = np.empty((n1, n2), dtype=np.float64)
    for (i, a), (j, b) in combine(data1, data2):
        buffer[i, j] = evaluate(a, b)

    logger.info(f"   Dimensions: {n1} x {n2}")
    return jnp.asarray(buffer)
