"""Tests for index pair generation."""

from gramkit.matrix.combine import combine


def test_cross_product_covers_all_pairs():
    """Without a filter every (i, j) appears once, rows outermost."""
    pairs = list(combine(["a", "b"], ["x", "y", "z"]))

    assert len(pairs) == 6
    assert [(i, j) for (i, _), (j, _) in pairs] == [
        (0, 0), (0, 1), (0, 2), (1, 0), (1, 1), (1, 2)
    ]
    assert pairs[4] == ((1, "b"), (1, "y"))


def test_symmetric_keeps_lower_triangle():
    """Symmetric filter keeps i >= j only."""
    n = 5
    pairs = [(i, j) for (i, _), (j, _) in combine(list(range(n)), symmetric=True)]

    assert len(pairs) == n * (n + 1) // 2
    assert all(i >= j for i, j in pairs)
    assert len(set(pairs)) == len(pairs)


def test_single_sequence_defaults_to_self_product():
    """Omitting the second sequence pairs the first with itself."""
    data = [10, 20, 30]
    assert list(combine(data)) == list(combine(data, data))


def test_deterministic():
    """Same input gives the same sequence every time."""
    data = [3.0, 1.0, 2.0, 5.0]
    assert list(combine(data, symmetric=True)) == list(combine(data, symmetric=True))


def test_empty_sequences():
    assert list(combine([], [1, 2])) == []
    assert list(combine([], symmetric=True)) == []
