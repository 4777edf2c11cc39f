"""
matrix.py
~~~~~~~~~

A dense float32 matrix with a mildly fluent, immutable-by-convention API.

Arithmetic never touches its operands; every operation allocates a new
Matrix. Only ``set``, ``set_all``, ``set_from`` and ``load`` write into an
existing instance, and those are meant for initialization and loading.

    m = Matrix(3, 3)         # 3x3 matrix
    v = Matrix(3, 1)         # 3x1 column vector
    b = Matrix(3, 1)         # another column vector

    mv = m.times(v).plus(b)  # m, v and b are unmodified

All arithmetic is carried out in single precision with results rounded
to float32 after every step, and reductions run in a fixed left-to-right
order, so results are reproducible bit for bit.
"""

import sys
import logging
import numbers
import operator
from typing import Any, BinaryIO, List, Optional, Sequence, TextIO, Tuple

import numpy as np

from nnmatrix.config import DTYPE, FLOAT_SIZE, WIRE_DTYPE
from nnmatrix.exceptions import (
    MatrixIOError,
    OutOfRangeError,
    ShapeMismatchError
)
from nnmatrix.formatting import ValueFormatter

logger = logging.getLogger(__name__)


def _read_exactly(source: BinaryIO, size: int) -> bytes:
    """Read up to ``size`` bytes, retrying short reads until EOF."""
    chunks = []
    remaining = size
    while remaining > 0:
        chunk = source.read(remaining)
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    return b''.join(chunks)


class Matrix:
    """
    Fixed-shape rows x cols grid of 32-bit floats.

    Values live in one contiguous row-major numpy buffer owned by the
    instance; element (i, j) sits at offset ``i * cols + j``. No two
    matrices ever share a buffer.

    Matrices are mutable through the explicit mutators and therefore
    unhashable.
    """

    __slots__ = ('_rows', '_cols', '_data')

    # Make numpy defer to our reflected operators instead of broadcasting
    __array_ufunc__ = None

    def __init__(self, rows: int, cols: int, fill: float = 0.0):
        """
        Create a rows x cols matrix with every element set to ``fill``.

        Args:
            rows: Number of rows (>= 0)
            cols: Number of columns (>= 0)
            fill: Initial value of every element

        Raises:
            ValueError: If either extent is negative
        """
        rows = operator.index(rows)
        cols = operator.index(cols)
        if rows < 0 or cols < 0:
            raise ValueError(
                f"Matrix extents must be non-negative, got ({rows},{cols})"
            )

        self._rows = rows
        self._cols = cols
        self._data = np.full(rows * cols, fill, dtype=DTYPE)

    @classmethod
    def _adopt(cls, rows: int, cols: int, data: np.ndarray) -> 'Matrix':
        """Wrap a freshly allocated buffer without copying it again."""
        m = cls.__new__(cls)
        m._rows = rows
        m._cols = cols
        m._data = data.reshape(rows * cols)
        return m

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[float]]) -> 'Matrix':
        """
        Build a matrix from a nested literal, e.g. ``[[1, 2], [3, 4]]``.

        The column count comes from the first row; an empty outer
        sequence gives a 0x0 matrix.

        Raises:
            ShapeMismatchError: If any row differs in length from the first
        """
        row_count = len(rows)
        if row_count == 0:
            return cls(0, 0)

        col_count = len(rows[0])
        for i, row in enumerate(rows):
            if len(row) != col_count:
                raise ShapeMismatchError(
                    f"Row {i} has {len(row)} values but row 0 has "
                    f"{col_count}",
                    left_shape=(row_count, col_count),
                    right_shape=(1, len(row)),
                    operation='from_rows'
                )

        data = np.array(
            [value for row in rows for value in row], dtype=DTYPE
        )
        return cls._adopt(row_count, col_count, data)

    @classmethod
    def from_numpy(cls, array: Any) -> 'Matrix':
        """
        Copy a 2-D array-like into a new matrix, casting to float32.

        Raises:
            ValueError: If the input is not two-dimensional
        """
        values = np.asarray(array)
        if values.ndim != 2:
            raise ValueError(
                f"Expected a 2-D array, got {values.ndim} dimension(s)"
            )
        rows, cols = values.shape
        return cls._adopt(rows, cols, np.array(values, dtype=DTYPE, order='C'))

    # ------------------------------------------------------------------
    # Shape and element access
    # ------------------------------------------------------------------

    @property
    def rows(self) -> int:
        return self._rows

    @property
    def cols(self) -> int:
        return self._cols

    @property
    def shape(self) -> Tuple[int, int]:
        return (self._rows, self._cols)

    def _grid(self) -> np.ndarray:
        # 2-D view over our own buffer; never handed out
        return self._data.reshape(self._rows, self._cols)

    def _offset(self, i: int, j: int) -> int:
        i = operator.index(i)
        j = operator.index(j)
        if not (0 <= i < self._rows and 0 <= j < self._cols):
            raise OutOfRangeError(
                f"Index ({i},{j}) out of range for matrix of dimensions "
                f"({self._rows},{self._cols})",
                index=(i, j),
                shape=self.shape
            )
        return i * self._cols + j

    def get(self, i: int, j: int) -> float:
        """Return element (i, j)."""
        return float(self._data[self._offset(i, j)])

    def set(self, i: int, j: int, value: float) -> None:
        """Overwrite element (i, j), rounding ``value`` to float32."""
        self._data[self._offset(i, j)] = value

    def __getitem__(self, index: Tuple[int, int]) -> float:
        i, j = index
        return self.get(i, j)

    def __setitem__(self, index: Tuple[int, int], value: float) -> None:
        i, j = index
        self.set(i, j, value)

    # ------------------------------------------------------------------
    # Copying and in-place initialization
    # ------------------------------------------------------------------

    def clone(self) -> 'Matrix':
        """Return an independent deep copy."""
        return Matrix._adopt(self._rows, self._cols, self._data.copy())

    def __copy__(self) -> 'Matrix':
        return self.clone()

    def __deepcopy__(self, memo: dict) -> 'Matrix':
        return self.clone()

    def set_from(self, other: 'Matrix') -> None:
        """
        Overwrite every element with the matching element of ``other``.

        The shapes are checked before anything is written, so a mismatch
        leaves this matrix untouched.

        Raises:
            ShapeMismatchError: If the shapes differ
        """
        self._check_same_shape(other, 'set_from', "Can't copy from matrix")
        np.copyto(self._data, other._data)

    def set_all(self, value: float) -> None:
        """Set every element to ``value``."""
        self._data.fill(value)

    def to_numpy(self) -> np.ndarray:
        """Return a (rows, cols) float32 copy of the values."""
        return self._grid().copy()

    def to_list(self) -> List[List[float]]:
        """Return the values as nested Python lists, one list per row."""
        return self._grid().tolist()

    # ------------------------------------------------------------------
    # Arithmetic
    # ------------------------------------------------------------------

    @staticmethod
    def _require_matrix(other: Any, operation: str) -> None:
        if not isinstance(other, Matrix):
            raise TypeError(
                f"{operation} expects a Matrix, got {type(other).__name__}"
            )

    def _check_same_shape(
        self,
        other: 'Matrix',
        operation: str,
        description: str
    ) -> None:
        self._require_matrix(other, operation)
        if self.shape != other.shape:
            raise ShapeMismatchError(
                f"{description} of different dimensions "
                f"({self._rows},{self._cols}) vs "
                f"({other._rows},{other._cols})",
                left_shape=self.shape,
                right_shape=other.shape,
                operation=operation
            )

    def times(self, other: 'Matrix') -> 'Matrix':
        """
        Matrix product ``self @ other``.

        Each element is accumulated in float32 from 0.0, adding the
        products ``self[i, k] * other[k, j]`` for k = 0, 1, ... in order.
        Float addition is not associative, so this order is part of the
        contract; results differ in the last bits from a BLAS matmul.

        Args:
            other: Right operand with ``other.rows == self.cols``

        Returns:
            Matrix: New (self.rows, other.cols) matrix

        Raises:
            ShapeMismatchError: If self.cols != other.rows
        """
        self._require_matrix(other, 'times')
        if self._cols != other._rows:
            raise ShapeMismatchError(
                f"Can't multiply matrix with {self._cols} cols with matrix "
                f"with {other._rows} rows ({self._rows},{self._cols}) vs "
                f"({other._rows},{other._cols})",
                left_shape=self.shape,
                right_shape=other.shape,
                operation='times'
            )

        left = self._grid()
        right = other._grid()
        product = np.zeros((self._rows, other._cols), dtype=DTYPE)

        # One rank-1 update per k keeps the per-element summation order
        for k in range(self._cols):
            product += np.multiply.outer(left[:, k], right[k, :])

        return Matrix._adopt(self._rows, other._cols, product)

    def hadamard_times(self, other: 'Matrix') -> 'Matrix':
        """
        Computes the "Hadamard" product, which is simply multiplying
        corresponding elements. Both inputs and the output share a shape.
        """
        self._check_same_shape(
            other, 'hadamard_times', "Can't array multiply matrices"
        )
        return Matrix._adopt(
            self._rows, self._cols, self._data * other._data
        )

    def plus(self, other: 'Matrix') -> 'Matrix':
        self._check_same_shape(other, 'plus', "Can't add matrices")
        return Matrix._adopt(
            self._rows, self._cols, self._data + other._data
        )

    def minus(self, other: 'Matrix') -> 'Matrix':
        self._check_same_shape(other, 'minus', "Can't subtract matrices")
        return Matrix._adopt(
            self._rows, self._cols, self._data - other._data
        )

    def scalar_times(self, c: float) -> 'Matrix':
        """Multiply every element by ``c`` (rounded to float32 first)."""
        return Matrix._adopt(
            self._rows, self._cols, self._data * DTYPE(c)
        )

    def array_pow(self, exponent: float) -> 'Matrix':
        """
        Raise every element to ``exponent``.

        Each value is widened to double, raised with the platform power
        function and rounded back to float32. A negative base with a
        non-integer exponent yields NaN; that is accepted, not an error.
        """
        power = float(DTYPE(exponent))
        with np.errstate(invalid='ignore', divide='ignore', over='ignore'):
            result = np.power(self._data.astype(np.float64), power)
            result = result.astype(DTYPE)
        return Matrix._adopt(self._rows, self._cols, result)

    def sum(self) -> float:
        """
        Sum of all elements, accumulated in float32 in row-major order.

        Returns:
            float: The float32 total as a Python float
        """
        if self._data.size == 0:
            return 0.0
        # accumulate adds strictly left to right, unlike pairwise np.sum
        total = np.add.accumulate(self._data, dtype=DTYPE)[-1]
        # + 0.0 turns an all-negative-zero total into +0.0
        return float(total) + 0.0

    def transpose(self) -> 'Matrix':
        """Return the (cols, rows) transpose."""
        return Matrix._adopt(self._cols, self._rows, self._grid().T.copy())

    @property
    def T(self) -> 'Matrix':
        return self.transpose()

    def equals(self, other: 'Matrix') -> bool:
        """
        True when ``other`` has the same shape and bit-identical values.

        Comparison is exact: NaN equals NaN with the same bit pattern,
        while 0.0 and -0.0 differ. Anything that is not a Matrix compares
        unequal.
        """
        if not isinstance(other, Matrix):
            return False
        if self.shape != other.shape:
            return False
        return bool(np.array_equal(
            self._data.view(np.uint32), other._data.view(np.uint32)
        ))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.equals(other)

    __hash__ = None  # type: ignore[assignment]

    def rms_error(self, other: 'Matrix') -> float:
        """
        Error between two equally shaped matrices.

        Despite the name this is ``sqrt(sum((self - other) ** 2))``; the
        squared differences are NOT divided by the element count. Existing
        training code and saved error curves depend on this value, so the
        formula is kept as is.

        Raises:
            ShapeMismatchError: If the shapes differ
        """
        squared = self.minus(other).array_pow(2.0)
        return float(np.sqrt(DTYPE(squared.sum())))

    # ------------------------------------------------------------------
    # Operator sugar
    # ------------------------------------------------------------------

    def __matmul__(self, other: Any) -> 'Matrix':
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.times(other)

    def __add__(self, other: Any) -> 'Matrix':
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.plus(other)

    def __sub__(self, other: Any) -> 'Matrix':
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.minus(other)

    def __mul__(self, other: Any) -> 'Matrix':
        if isinstance(other, Matrix):
            return self.hadamard_times(other)
        if isinstance(other, numbers.Real):
            return self.scalar_times(other)
        return NotImplemented

    def __rmul__(self, other: Any) -> 'Matrix':
        if isinstance(other, numbers.Real):
            return self.scalar_times(other)
        return NotImplemented

    def __neg__(self) -> 'Matrix':
        return self.scalar_times(-1.0)

    def __pow__(self, exponent: Any) -> 'Matrix':
        if not isinstance(exponent, numbers.Real):
            return NotImplemented
        return self.array_pow(exponent)

    # ------------------------------------------------------------------
    # Serialization and rendering
    # ------------------------------------------------------------------

    @property
    def nbytes(self) -> int:
        """Size of the serialized payload in bytes."""
        return self._data.size * FLOAT_SIZE

    def save(self, sink: BinaryIO) -> None:
        """
        Write the values as big-endian float32, row-major, no header.

        Args:
            sink: Writable binary stream

        Raises:
            MatrixIOError: If the stream rejects the write
        """
        payload = self._data.astype(WIRE_DTYPE).tobytes()
        try:
            sink.write(payload)
        except (OSError, ValueError) as e:
            logger.error(
                f"Failed to save ({self._rows},{self._cols}) matrix: {e}"
            )
            raise MatrixIOError(
                f"Failed to save ({self._rows},{self._cols}) matrix: {e}",
                expected_bytes=len(payload)
            ) from e

        logger.debug(
            f"Saved ({self._rows},{self._cols}) matrix, "
            f"{len(payload)} bytes"
        )

    def load(self, source: BinaryIO) -> None:
        """
        Fill this matrix from big-endian float32 values written by save().

        The stream carries no shape, so the matrix must already have the
        right shape. The whole payload is read before anything is written;
        on failure the matrix is left as it was.

        Args:
            source: Readable binary stream

        Raises:
            MatrixIOError: On a stream error or if the stream ends early
        """
        expected = self.nbytes
        try:
            payload = _read_exactly(source, expected)
        except (OSError, ValueError) as e:
            logger.error(
                f"Failed to load ({self._rows},{self._cols}) matrix: {e}"
            )
            raise MatrixIOError(
                f"Failed to load ({self._rows},{self._cols}) matrix: {e}",
                expected_bytes=expected
            ) from e

        if len(payload) < expected:
            logger.error(
                f"Truncated stream loading ({self._rows},{self._cols}) "
                f"matrix: got {len(payload)} of {expected} bytes"
            )
            raise MatrixIOError(
                f"Truncated stream: expected {expected} bytes for "
                f"({self._rows},{self._cols}) matrix, got {len(payload)}",
                expected_bytes=expected,
                actual_bytes=len(payload)
            )

        self._data[:] = np.frombuffer(payload, dtype=WIRE_DTYPE)
        logger.debug(
            f"Loaded ({self._rows},{self._cols}) matrix, {expected} bytes"
        )

    def _render_lines(self) -> List[str]:
        formatter = ValueFormatter()
        return formatter.format_rows(self._grid().tolist())

    def print(self, sink: Optional[TextIO] = None) -> None:
        """
        Write one ``[ v1 v2 ... ]`` line per row to ``sink``.

        Args:
            sink: Text stream, defaults to sys.stdout
        """
        out = sys.stdout if sink is None else sink
        for line in self._render_lines():
            out.write(line)
            out.write('\n')

    def __str__(self) -> str:
        return '\n'.join(self._render_lines())

    def __repr__(self) -> str:
        return f"Matrix(rows={self._rows}, cols={self._cols})"
