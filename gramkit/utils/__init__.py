"""Utility functions for validation."""

from .validation import check_positive_int, check_length, check_eigendecomposition

__all__ = [
    "check_positive_int",
    "check_length",
    "check_eigendecomposition",
]
