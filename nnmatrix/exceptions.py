"""
exceptions.py
~~~~~~~~~~~~~

Exception hierarchy for nnmatrix.

Every error raised by the package derives from MatrixError, so callers
can catch library failures with a single clause. Each concrete error also
derives from the matching builtin (ValueError, IndexError, OSError) so
generic handlers keep working.
"""

from typing import Optional, Tuple

Shape = Tuple[int, int]


class MatrixError(Exception):
    """Base exception for all nnmatrix errors."""
    pass


class ShapeMismatchError(MatrixError, ValueError):
    """
    Operand shapes violate an operation's dimensional contract.

    Attributes:
        left_shape: (rows, cols) of the receiving matrix
        right_shape: (rows, cols) of the operand
        operation: Name of the operation that failed
    """

    def __init__(
        self,
        message: str,
        left_shape: Optional[Shape] = None,
        right_shape: Optional[Shape] = None,
        operation: Optional[str] = None
    ):
        super().__init__(message)
        self.left_shape = left_shape
        self.right_shape = right_shape
        self.operation = operation


class OutOfRangeError(MatrixError, IndexError):
    """
    Element index falls outside the matrix extents.

    Attributes:
        index: The (row, col) pair that was requested
        shape: (rows, cols) of the matrix
    """

    def __init__(
        self,
        message: str,
        index: Optional[Tuple[int, int]] = None,
        shape: Optional[Shape] = None
    ):
        super().__init__(message)
        self.index = index
        self.shape = shape


class MatrixIOError(MatrixError, OSError):
    """
    Reading or writing a matrix payload failed.

    Attributes:
        expected_bytes: Number of bytes the payload should contain
        actual_bytes: Number of bytes actually read, for truncated streams
    """

    def __init__(
        self,
        message: str,
        expected_bytes: Optional[int] = None,
        actual_bytes: Optional[int] = None
    ):
        super().__init__(message)
        self.expected_bytes = expected_bytes
        self.actual_bytes = actual_bytes
