"""Tests for the high-level GramBuilder."""

from concurrent.futures import ThreadPoolExecutor

import pytest
import jax.numpy as jnp

from gramkit.api import GramBuilder
from gramkit.kernels.nystrom import NystromFeatureMap
from gramkit.matrix.partitioned import PartitionedPSDMatrix


def abs_diff(a, b):
    return abs(a - b)


def test_block_sizes_default_to_rows():
    builder = GramBuilder(evaluate=abs_diff, row_block_size=4)
    assert builder.col_block_size == 4


def test_rejects_bad_configuration():
    with pytest.raises(ValueError):
        GramBuilder(evaluate=abs_diff, row_block_size=0)
    with pytest.raises(ValueError):
        GramBuilder(evaluate=abs_diff, row_block_size=2, col_block_size=-1)
    with pytest.raises(ValueError):
        GramBuilder(evaluate="not callable")


def test_partitioned_requires_block_sizes(scalar_data):
    builder = GramBuilder(evaluate=abs_diff)

    assert builder.gram(scalar_data).shape == (3, 3)
    with pytest.raises(ValueError, match="row_block_size"):
        builder.partitioned(scalar_data)
    with pytest.raises(ValueError, match="row_block_size"):
        builder.cross_partitioned(scalar_data, scalar_data)


def test_end_to_end(scalar_data):
    builder = GramBuilder(evaluate=abs_diff, row_block_size=2, show_progress=True)
    expected = jnp.array([[0.0, 1.0, 2.0], [1.0, 0.0, 1.0], [2.0, 1.0, 0.0]])

    assert jnp.array_equal(builder.gram(scalar_data).matrix, expected)
    assert jnp.array_equal(builder.cross([1.0], [1.0, 5.0]), jnp.array([[0.0, 4.0]]))

    partitioned = builder.partitioned(scalar_data)
    assert isinstance(partitioned, PartitionedPSDMatrix)
    assert jnp.array_equal(builder.dense(partitioned), expected)

    with ThreadPoolExecutor(max_workers=2) as pool:
        cross = builder.cross_partitioned(scalar_data, [1.0, 5.0], executor=pool)
        assert jnp.array_equal(
            builder.dense(cross),
            jnp.array([[0.0, 4.0], [1.0, 3.0], [2.0, 2.0]])
        )


def test_nystrom(rbf_kernel, sample_points):
    X, _ = sample_points
    builder = GramBuilder(evaluate=rbf_kernel.evaluate)

    phi_map = builder.nystrom(X[:6], rank=4)

    assert isinstance(phi_map, NystromFeatureMap)
    assert phi_map.feature_map(X).shape == (X.shape[0], 4)
