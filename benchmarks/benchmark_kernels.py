"""Benchmark dense and partitioned kernel matrix construction."""

import time
from concurrent.futures import ThreadPoolExecutor

import jax.random as random
import numpy as np
from gramkit.kernels.rbf import RBFKernel
from gramkit.matrix.dense import build_kernel_matrix
from gramkit.matrix.partitioned import build_partitioned_kernel_matrix


def _points(n_samples: int, n_features: int):
    key = random.PRNGKey(42)
    return np.asarray(random.normal(key, (n_samples, n_features)))


def benchmark_dense(n_samples: int = 300, n_features: int = 10):
    """Benchmark the symmetric dense builder."""
    X = _points(n_samples, n_features)
    kernel = RBFKernel(sigma=1.0)

    start = time.time()
    build_kernel_matrix(X, n_samples, kernel.evaluate)
    elapsed = time.time() - start

    n_evals = n_samples * (n_samples + 1) // 2
    print(f"Dense: {n_samples}x{n_samples} matrix, {n_features} features")
    print(f"Time: {elapsed:.4f} seconds")
    print(f"Throughput: {n_evals / elapsed:.2f} kernel evaluations/second")

    return elapsed


def benchmark_partitioned(
    n_samples: int = 300,
    n_features: int = 10,
    block_size: int = 64,
    max_workers: int = 1
):
    """Benchmark the symmetric partitioned builder, optionally on a thread pool."""
    X = _points(n_samples, n_features)
    kernel = RBFKernel(sigma=1.0)

    start = time.time()
    if max_workers > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            build_partitioned_kernel_matrix(
                X, n_samples, block_size, block_size, kernel.evaluate, executor=pool
            ).to_dense()
    else:
        build_partitioned_kernel_matrix(
            X, n_samples, block_size, block_size, kernel.evaluate
        ).to_dense()
    elapsed = time.time() - start

    print(f"Partitioned: {n_samples}x{n_samples} matrix, blocks of {block_size}, {max_workers} workers")
    print(f"Time: {elapsed:.4f} seconds")

    return elapsed


def compare_dense_vs_partitioned():
    """Compare dense and partitioned construction."""
    sizes = [100, 300, 600]

    print("=" * 60)
    print("Dense vs Partitioned Kernel Matrix Construction")
    print("=" * 60)

    for n in sizes:
        print(f"\nSize: {n}x{n}")
        print("-" * 60)

        dense_time = benchmark_dense(n_samples=n)
        partitioned_time = benchmark_partitioned(n_samples=n, max_workers=4)

        print(f"Ratio: {partitioned_time / dense_time:.2f}x")


if __name__ == "__main__":
    compare_dense_vs_partitioned()
