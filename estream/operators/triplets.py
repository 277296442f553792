"""Sparse matrix builder from (row, col, value) triplets.

Blocks are built as triplet lists in their local (altitude) indices,
shifted into place in the stacked system and converted to a sparse
matrix once. Duplicate entries are summed on conversion, which is what
adding two operators on the same diagonal needs.
"""

from __future__ import annotations

import numpy as np
from dataclasses import dataclass
from scipy import sparse


@dataclass
class Triplets:
    """COO-style entries of a sparse matrix.

    Attributes:
        rows: Row indices
        cols: Column indices
        vals: Values
    """

    rows: np.ndarray
    cols: np.ndarray
    vals: np.ndarray

    def __post_init__(self):
        self.rows = np.asarray(self.rows, dtype=np.int64).ravel()
        self.cols = np.asarray(self.cols, dtype=np.int64).ravel()
        self.vals = np.asarray(self.vals, dtype=float).ravel()
        if not (self.rows.size == self.cols.size == self.vals.size):
            raise ValueError(
                f"Triplet arrays differ in length: rows={self.rows.size}, "
                f"cols={self.cols.size}, vals={self.vals.size}"
            )

    def __len__(self) -> int:
        return self.vals.size

    def __add__(self, other: "Triplets") -> "Triplets":
        return Triplets(
            np.concatenate([self.rows, other.rows]),
            np.concatenate([self.cols, other.cols]),
            np.concatenate([self.vals, other.vals]),
        )

    def __neg__(self) -> "Triplets":
        return self.scaled(-1.0)

    def __sub__(self, other: "Triplets") -> "Triplets":
        return self + (-other)

    def scaled(self, factor: float) -> "Triplets":
        return Triplets(self.rows, self.cols, self.vals * factor)

    def without_rows(self, rows) -> "Triplets":
        """Drop every entry in the given rows."""
        keep = ~np.isin(self.rows, rows)
        return Triplets(self.rows[keep], self.cols[keep], self.vals[keep])

    def without_entries(self, row: int, col: int) -> "Triplets":
        """Drop every entry at a single position."""
        keep = ~((self.rows == row) & (self.cols == col))
        return Triplets(self.rows[keep], self.cols[keep], self.vals[keep])

    def shifted(self, row_offset: int, col_offset: int) -> "Triplets":
        """Move the block to (row_offset, col_offset) in a larger matrix."""
        return Triplets(self.rows + row_offset, self.cols + col_offset, self.vals)

    def to_sparse(self, shape, format: str = "csr") -> sparse.spmatrix:
        """Convert to a scipy sparse matrix, summing duplicate entries."""
        matrix = sparse.coo_matrix((self.vals, (self.rows, self.cols)), shape=shape)
        return matrix.asformat(format)

    @classmethod
    def empty(cls) -> "Triplets":
        return cls(np.empty(0, dtype=np.int64), np.empty(0, dtype=np.int64), np.empty(0))

    @classmethod
    def diagonal(cls, values, offset: int = 0) -> "Triplets":
        """Entries on one diagonal; ``values[k]`` lands on row k (offset >= 0)
        or row k - offset (offset < 0)."""
        values = np.asarray(values, dtype=float).ravel()
        k = np.arange(values.size)
        if offset >= 0:
            return cls(k, k + offset, values)
        return cls(k - offset, k, values)

    @classmethod
    def concatenate(cls, parts) -> "Triplets":
        parts = list(parts)
        if not parts:
            return cls.empty()
        return cls(
            np.concatenate([p.rows for p in parts]),
            np.concatenate([p.cols for p in parts]),
            np.concatenate([p.vals for p in parts]),
        )
