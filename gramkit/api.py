"""High-level API for gramkit."""

from concurrent.futures import Executor
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from jaxtyping import Array, Float

from .kernels.nystrom import NystromFeatureMap
from .matrix.dense import KernelMatrix, build_kernel_matrix, cross_kernel_matrix
from .matrix.partitioned import (
    PartitionedMatrix,
    PartitionedPSDMatrix,
    build_partitioned_kernel_matrix,
    cross_partitioned_kernel_matrix,
)
from .utils.validation import check_positive_int


@dataclass
class GramBuilder:
    """
    High-level interface bundling an evaluator with block settings.

    Example usage:

        builder = GramBuilder(
            evaluate=RBFKernel(sigma=1.0).evaluate,
            row_block_size=1000
        )

        # Small data: one dense matrix
        K = builder.gram(points).matrix

        # Large data: symmetric block grid, computed on demand
        blocks = builder.partitioned(points)
        for (r, c), block in blocks:
            store(r, c, block)

        # Approximate feature map from 200 prototypes
        phi = builder.nystrom(points[:200], rank=50)
        features = phi.feature_map(points)

    Parameters:
        evaluate: Pairwise kernel function
        row_block_size: Points per row block for partitioned builds
        col_block_size: Points per column block (defaults to row_block_size)
        show_progress: Show progress bars when assembling dense matrices
    """
    evaluate: Callable
    row_block_size: Optional[int] = None
    col_block_size: Optional[int] = None
    show_progress: bool = False

    def __post_init__(self):
        if not callable(self.evaluate):
            raise ValueError("evaluate must be callable")
        if self.row_block_size is not None:
            self.row_block_size = check_positive_int(self.row_block_size, "row_block_size")
        if self.col_block_size is None:
            self.col_block_size = self.row_block_size
        else:
            self.col_block_size = check_positive_int(self.col_block_size, "col_block_size")

    def _block_sizes(self):
        if self.row_block_size is None or self.col_block_size is None:
            raise ValueError("Partitioned builds need row_block_size (and col_block_size)")
        return self.row_block_size, self.col_block_size

    def gram(self, data: Sequence) -> KernelMatrix:
        """Dense symmetric kernel matrix over `data`."""
        return build_kernel_matrix(data, len(data), self.evaluate)

    def cross(self, data1: Sequence, data2: Sequence) -> Float[Array, "n1 n2"]:
        """Dense kernel matrix between two datasets."""
        return cross_kernel_matrix(data1, data2, self.evaluate)

    def partitioned(
        self,
        data: Sequence,
        executor: Optional[Executor] = None
    ) -> PartitionedPSDMatrix:
        """Symmetric block-partitioned kernel matrix over `data`."""
        row_block_size, col_block_size = self._block_sizes()
        return build_partitioned_kernel_matrix(
            data, len(data), row_block_size, col_block_size, self.evaluate, executor
        )

    def cross_partitioned(
        self,
        data1: Sequence,
        data2: Sequence,
        executor: Optional[Executor] = None
    ) -> PartitionedMatrix:
        """Block-partitioned kernel matrix between two datasets."""
        row_block_size, col_block_size = self._block_sizes()
        return cross_partitioned_kernel_matrix(
            data1, data2, row_block_size, col_block_size, self.evaluate, executor
        )

    def dense(self, matrix: PartitionedMatrix) -> Float[Array, "rows cols"]:
        """Assemble a partitioned matrix, honouring `show_progress`."""
        return matrix.to_dense(show_progress=self.show_progress)

    def nystrom(
        self,
        prototypes: Sequence,
        rank: Optional[int] = None,
        min_eigenvalue: float = 1e-10
    ) -> NystromFeatureMap:
        """Nystrom feature map from the kernel matrix over `prototypes`."""
        return NystromFeatureMap.from_prototypes(
            prototypes, self.evaluate, rank=rank, min_eigenvalue=min_eigenvalue
        )
