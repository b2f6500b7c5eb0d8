"""Block-partitioned kernel matrices for datasets too large for one dense matrix."""

import logging
import threading
from concurrent.futures import CancelledError, Executor, Future
from functools import partial
from typing import (
    Callable, Dict, Iterator, List, Optional, Sequence, Tuple, TypeVar
)

import jax.numpy as jnp
import numpy as np
from jaxtyping import Array, Float
from tqdm import tqdm

from .combine import combine
from .dense import build_kernel_matrix, cross_kernel_matrix
from .partition import BlockGroup, num_blocks, partition_blocks

logger = logging.getLogger(__name__)

T = TypeVar("T")
Evaluator = Callable[[T, T], float]

BlockIndex = Tuple[int, int]
BlockEntry = Tuple[BlockIndex, Float[Array, "r c"]]
BlockTask = Tuple[BlockIndex, Callable[[], Float[Array, "r c"]]]


class PartitionedMatrix:
    """
    A rows x cols matrix stored as a grid of dense blocks.

    Blocks come from a finite sequence of ((row_block, col_block), compute)
    tasks, where `compute()` returns the dense block. Each block is
    computed the first time iteration reaches it and memoized afterwards,
    so the evaluator never runs twice for the same block. A block whose
    computation raises is not stored; the next access runs it again (or,
    for an executor future, re-raises its error).

    Iteration may be shared between threads: blocks are computed one at a
    time under a lock.

    Parameters:
        tasks: Sequence of ((row_block, col_block), compute) pairs, in grid order
        rows: Total number of rows
        cols: Total number of columns
        num_row_blocks: Number of blocks along the rows
        num_col_blocks: Number of blocks along the columns
        futures: Futures backing the tasks, cancelled by `cancel()`
    """

    def __init__(
        self,
        tasks: Sequence[BlockTask],
        rows: int,
        cols: int,
        num_row_blocks: int,
        num_col_blocks: int,
        futures: Optional[List[Future]] = None
    ):
        self._tasks = list(tasks)
        self._entries: List[BlockEntry] = []
        self._index: Dict[BlockIndex, Float[Array, "r c"]] = {}
        self._futures = list(futures or [])
        self._cancelled = False
        self._lock = threading.Lock()

        self.rows = rows
        self.cols = cols
        self.num_row_blocks = num_row_blocks
        self.num_col_blocks = num_col_blocks

    @property
    def shape(self) -> Tuple[int, int]:
        """Logical (rows, cols) of the full matrix."""
        return self.rows, self.cols

    @property
    def block_grid(self) -> Tuple[int, int]:
        """(num_row_blocks, num_col_blocks)."""
        return self.num_row_blocks, self.num_col_blocks

    @property
    def num_entries(self) -> int:
        """Number of stored blocks once fully computed."""
        return len(self._tasks)

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def _pull(self) -> bool:
        """Compute the next pending block. False once every block is stored."""
        with self._lock:
            position = len(self._entries)
            if position >= len(self._tasks):
                return False
            if self._cancelled:
                raise CancelledError("Block computation was cancelled")
            index, compute = self._tasks[position]
            block = compute()
            self._entries.append((index, block))
            self._index[index] = block
            return True

    def __iter__(self) -> Iterator[BlockEntry]:
        return self.blocks()

    def blocks(self) -> Iterator[BlockEntry]:
        """Iterate over stored ((row_block, col_block), block) entries."""
        position = 0
        while position < len(self._entries) or self._pull():
            yield self._entries[position]
            position += 1

    def _grid_bounds(self) -> Tuple[int, int]:
        """Extent of the block grid that lookups are checked against."""
        return self.num_row_blocks, self.num_col_blocks

    def _check_block_index(self, row_block: int, col_block: int):
        n_rows, n_cols = self._grid_bounds()
        if not (0 <= row_block < n_rows and 0 <= col_block < n_cols):
            raise IndexError(
                f"Block ({row_block}, {col_block}) outside grid {n_rows} x {n_cols}"
            )

    def _stored_block(self, index: BlockIndex) -> Float[Array, "r c"]:
        while index not in self._index:
            if not self._pull():
                raise KeyError(f"No block stored at {index}")
        return self._index[index]

    def block(self, row_block: int, col_block: int) -> Float[Array, "r c"]:
        """Dense block at the given position of the block grid."""
        self._check_block_index(row_block, col_block)
        return self._stored_block((row_block, col_block))

    def _placements(self, index: BlockIndex, block) -> Iterator[BlockEntry]:
        """Blocks of the logical grid implied by one stored entry."""
        yield index, block

    def to_dense(self, show_progress: bool = False) -> Float[Array, "rows cols"]:
        """
        Assemble the full matrix from its blocks.

        Block offsets are derived from the block shapes, so the last row
        and column of blocks may be smaller than the rest.

        Parameters:
            show_progress: Show a progress bar while blocks are computed

        Returns:
            Dense matrix of shape (rows, cols)
        """
        iterator = self.blocks()
        if show_progress:
            iterator = tqdm(iterator, total=self.num_entries, desc="Assembling blocks")

        heights: Dict[int, int] = {}
        widths: Dict[int, int] = {}
        placed = []
        for index, block in iterator:
            for (r, c), values in self._placements(index, block):
                heights.setdefault(r, values.shape[0])
                widths.setdefault(c, values.shape[1])
                placed.append(((r, c), values))

        row_offsets = np.cumsum([0] + [heights[r] for r in sorted(heights)])
        col_offsets = np.cumsum([0] + [widths[c] for c in sorted(widths)])

        dense = np.zeros((self.rows, self.cols), dtype=np.float64)
        for (r, c), values in placed:
            top, left = row_offsets[r], col_offsets[c]
            dense[top:top + values.shape[0], left:left + values.shape[1]] = np.asarray(values)
        return jnp.asarray(dense)

    def cancel(self) -> int:
        """
        Stop scheduling blocks that have not started yet.

        Blocks already computed stay available; any further attempt to
        reach an unfinished block raises CancelledError.

        Returns:
            Number of pending futures that were cancelled
        """
        self._cancelled = True
        n_cancelled = sum(1 for future in self._futures if future.cancel())
        logger.info(f"Cancelled {n_cancelled} pending partitions")
        return n_cancelled


class PartitionedPSDMatrix(PartitionedMatrix):
    """
    Symmetric partitioned matrix storing only the lower block triangle.

    Only entries with row_block >= col_block exist; block (r, c) with
    r < c is the transpose of block (c, r). The data is chunked once, so
    lookups on both axes are bounded by the row block count even when the
    reported column block count differs.
    """

    def _grid_bounds(self) -> Tuple[int, int]:
        return self.num_row_blocks, self.num_row_blocks

    def block(self, row_block: int, col_block: int) -> Float[Array, "r c"]:
        self._check_block_index(row_block, col_block)
        if row_block < col_block:
            return self._stored_block((col_block, row_block)).T
        return self._stored_block((row_block, col_block))

    def _placements(self, index: BlockIndex, block) -> Iterator[BlockEntry]:
        yield index, block
        row_block, col_block = index
        if row_block != col_block:
            yield (col_block, row_block), block.T


def _symmetric_block(
    row_group: BlockGroup,
    col_group: BlockGroup,
    evaluate: Evaluator
) -> Float[Array, "r c"]:
    logger.info(f":- Partition: ({row_group.index}, {col_group.index})")
    if row_group.index == col_group.index:
        return build_kernel_matrix(row_group.elements, len(row_group), evaluate).matrix
    return cross_kernel_matrix(row_group.elements, col_group.elements, evaluate)


def _cross_block(
    row_group: BlockGroup,
    col_group: BlockGroup,
    evaluate: Evaluator
) -> Float[Array, "r c"]:
    logger.info(f":- Partition: ({row_group.index}, {col_group.index})")
    return cross_kernel_matrix(row_group.elements, col_group.elements, evaluate)


def _schedule(
    tasks: List[BlockTask],
    executor: Optional[Executor]
) -> Tuple[List[BlockTask], List[Future]]:
    """Submit block tasks to an executor, if any; each task then resolves its future."""
    if executor is None:
        return tasks, []

    submitted = [(index, executor.submit(compute)) for index, compute in tasks]
    return (
        [(index, future.result) for index, future in submitted],
        [future for _, future in submitted]
    )


def build_partitioned_kernel_matrix(
    data: Sequence[T],
    length: int,
    row_block_size: int,
    col_block_size: int,
    evaluate: Evaluator,
    executor: Optional[Executor] = None
) -> PartitionedPSDMatrix:
    """
    Build a symmetric kernel matrix blockwise over its lower block triangle.

    The data is chunked with `row_block_size`, which is used for both axes.
    Diagonal blocks are built with the symmetric dense builder, off-diagonal
    blocks with the cross builder; the upper block triangle is never
    evaluated.

    Parameters:
        data: Dataset of `length` points
        length: Number of points (rows and columns of the matrix)
        row_block_size: Points per row block
        col_block_size: Points per column block (sets the column block count)
        evaluate: Symmetric pairwise kernel function
        executor: Optional executor computing blocks concurrently; the
            caller owns it and decides the worker count

    Returns:
        PartitionedPSDMatrix with entries for row_block >= col_block
    """
    rows, cols = length, length

    logger.info("Constructing partitioned kernel matrix.")
    logger.info(f"Dimension: {rows} x {cols}")

    num_row_blocks = num_blocks(rows, row_block_size)
    num_col_blocks = num_blocks(cols, col_block_size)
    logger.info(f"Blocks: {num_row_blocks} x {num_col_blocks}")

    groups = partition_blocks(data, row_block_size)

    logger.info("~~~~~~~~~~~~~~~~~~~~~~~")
    logger.info("Constructing Partitions")
    tasks = [
        ((row_group.index, col_group.index),
         partial(_symmetric_block, row_group, col_group, evaluate))
        for (_, row_group), (_, col_group) in combine(groups, symmetric=True)
    ]
    tasks, futures = _schedule(tasks, executor)

    return PartitionedPSDMatrix(
        tasks, rows, cols, num_row_blocks, num_col_blocks, futures=futures
    )


def cross_partitioned_kernel_matrix(
    data1: Sequence[T],
    data2: Sequence[T],
    row_block_size: int,
    col_block_size: int,
    evaluate: Evaluator,
    executor: Optional[Executor] = None
) -> PartitionedMatrix:
    """
    Build the rectangular kernel matrix between two datasets blockwise.

    Rows are chunked with `row_block_size` and columns with
    `col_block_size`; every block of the full grid is computed.

    Parameters:
        data1: Row dataset
        data2: Column dataset
        row_block_size: Points of `data1` per row block
        col_block_size: Points of `data2` per column block
        evaluate: Pairwise kernel function
        executor: Optional executor computing blocks concurrently

    Returns:
        PartitionedMatrix of shape (len(data1), len(data2))
    """
    rows, cols = len(data1), len(data2)

    logger.info("Constructing cross partitioned kernel matrix.")
    logger.info(f"Dimension: {rows} x {cols}")

    num_row_blocks = num_blocks(rows, row_block_size)
    num_col_blocks = num_blocks(cols, col_block_size)
    logger.info(f"Blocks: {num_row_blocks} x {num_col_blocks}")

    row_groups = partition_blocks(data1, row_block_size)
    col_groups = partition_blocks(data2, col_block_size)

    logger.info("~~~~~~~~~~~~~~~~~~~~~~~")
    logger.info("Constructing Partitions")
    tasks = [
        ((row_group.index, col_group.index),
         partial(_cross_block, row_group, col_group, evaluate))
        for (_, row_group), (_, col_group) in combine(row_groups, col_groups)
    ]
    tasks, futures = _schedule(tasks, executor)

    return PartitionedMatrix(
        tasks, rows, cols, num_row_blocks, num_col_blocks, futures=futures
    )
