"""Kernel matrix builders."""

from .combine import combine
from .dense import KernelMatrix, build_kernel_matrix, cross_kernel_matrix
from .partition import BlockGroup, num_blocks, partition_blocks
from .partitioned import (
    PartitionedMatrix,
    PartitionedPSDMatrix,
    build_partitioned_kernel_matrix,
    cross_partitioned_kernel_matrix,
)

__all__ = [
    "combine",
    "KernelMatrix",
    "build_kernel_matrix",
    "cross_kernel_matrix",
    "BlockGroup",
    "num_blocks",
    "partition_blocks",
    "PartitionedMatrix",
    "PartitionedPSDMatrix",
    "build_partitioned_kernel_matrix",
    "cross_partitioned_kernel_matrix",
]
