"""Splitting datasets into contiguous blocks."""

import math
from dataclasses import dataclass
from typing import Generic, List, Sequence, TypeVar

from ..utils.validation import check_positive_int

T = TypeVar("T")


@dataclass(frozen=True)
class BlockGroup(Generic[T]):
    """
    A contiguous run of data points and its position in the block grid.

    Attributes:
        elements: Points in this block
        index: Zero-based block index
    """
    elements: Sequence[T]
    index: int

    def __len__(self) -> int:
        return len(self.elements)


def num_blocks(length: int, block_size: int) -> int:
    """Number of blocks of `block_size` needed to cover `length` points."""
    block_size = check_positive_int(block_size, "block_size")
    return math.ceil(length / block_size)


def partition_blocks(data: Sequence[T], block_size: int) -> List[BlockGroup[T]]:
    """
    Chunk a dataset into blocks of `block_size` points.

    All blocks hold exactly `block_size` points except possibly the last,
    which holds the remainder. Concatenating the blocks in order gives
    back the dataset.

    Parameters:
        data: Dataset to split
        block_size: Target number of points per block

    Returns:
        List of BlockGroup, block index equal to list position
    """
    block_size = check_positive_int(block_size, "block_size")
    return [
        BlockGroup(elements=data[start:start + block_size], index=index)
        for index, start in enumerate(range(0, len(data), block_size))
    ]
