"""
gramkit - Kernel (Gram) matrix construction

Dense and block-partitioned kernel matrices built from a pairwise evaluator,
plus Nystrom feature maps.
"""

__version__ = "0.1.0"

# Dense and partitioned builders
from .matrix.dense import (
    KernelMatrix,
    build_kernel_matrix,
    cross_kernel_matrix,
)
from .matrix.partitioned import (
    PartitionedMatrix,
    PartitionedPSDMatrix,
    build_partitioned_kernel_matrix,
    cross_partitioned_kernel_matrix,
)

# Kernels
from .kernels.rbf import RBFKernel
from .kernels.nystrom import EigenDecomposition, NystromFeatureMap

# High-level API
from .api import GramBuilder

__all__ = [
    # Version
    "__version__",
    # Builders
    "KernelMatrix",
    "build_kernel_matrix",
    "cross_kernel_matrix",
    "PartitionedMatrix",
    "PartitionedPSDMatrix",
    "build_partitioned_kernel_matrix",
    "cross_partitioned_kernel_matrix",
    # Kernels
    "RBFKernel",
    "EigenDecomposition",
    "NystromFeatureMap",
    # High-level API
    "GramBuilder",
]
