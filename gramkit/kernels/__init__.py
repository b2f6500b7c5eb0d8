"""Kernel implementations for gramkit."""

from .base import Kernel, ApproximateKernel
from .rbf import RBFKernel
from .nystrom import EigenDecomposition, NystromFeatureMap, nystrom_features

__all__ = [
    "Kernel",
    "ApproximateKernel",
    "RBFKernel",
    "EigenDecomposition",
    "NystromFeatureMap",
    "nystrom_features",
]
