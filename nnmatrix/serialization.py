"""
serialization.py
~~~~~~~~~~~~~~~~

Stream and file persistence for sequences of matrices.

A network saves its parameters as the raw payloads of its weight and
bias matrices written back to back. Nothing in the file records shapes,
so loading requires matrices that already have the shapes they were
saved with, supplied in the same order.
"""

import os
import logging
from typing import BinaryIO, Iterable, Sequence

from nnmatrix.exceptions import MatrixIOError
from nnmatrix.matrix import Matrix

# Configure module logger
logger = logging.getLogger(__name__)


def payload_size(matrices: Iterable[Matrix]) -> int:
    """
    Number of bytes the matrices occupy once serialized.

    Args:
        matrices: Matrices in save order

    Returns:
        int: Sum of rows * cols * 4 over all matrices
    """
    return sum(m.nbytes for m in matrices)


def save_matrices(matrices: Iterable[Matrix], sink: BinaryIO) -> int:
    """
    Write each matrix's payload to ``sink`` in order.

    Args:
        matrices: Matrices to write
        sink: Writable binary stream

    Returns:
        int: Total number of bytes written

    Raises:
        MatrixIOError: If any write fails
    """
    total = 0
    count = 0
    for m in matrices:
        m.save(sink)
        total += m.nbytes
        count += 1

    logger.debug(f"Saved {count} matrices, {total} bytes")
    return total


def load_matrices(matrices: Iterable[Matrix], source: BinaryIO) -> int:
    """
    Load each pre-shaped matrix from ``source`` in order.

    Matrices loaded before a failure keep their new values; the one that
    hit the failure is left unchanged.

    Args:
        matrices: Target matrices, shaped as when they were saved
        source: Readable binary stream

    Returns:
        int: Total number of bytes read

    Raises:
        MatrixIOError: If the stream fails or ends early
    """
    total = 0
    count = 0
    for m in matrices:
        m.load(source)
        total += m.nbytes
        count += 1

    logger.debug(f"Loaded {count} matrices, {total} bytes")
    return total


def _ensure_directory(path: str) -> None:
    """Create the file's parent directory if it doesn't exist."""
    directory = os.path.dirname(path)
    if directory and not os.path.exists(directory):
        os.makedirs(directory)


def save_to_file(path: str, matrices: Sequence[Matrix]) -> int:
    """
    Save matrices to a file, replacing any existing content.

    Args:
        path: Destination file path; parent directories are created
        matrices: Matrices to write, in order

    Returns:
        int: Number of bytes written

    Raises:
        MatrixIOError: If the file cannot be created or written

    Example:
        >>> weights = Matrix(30, 784)
        >>> biases = Matrix(30, 1)
        >>> save_to_file('models/layer1.bin', [weights, biases])
        94200
    """
    try:
        _ensure_directory(path)
        with open(path, 'wb') as f:
            written = save_matrices(matrices, f)
    except MatrixIOError:
        raise
    except OSError as e:
        logger.error(f"Could not write matrices to '{path}': {e}")
        raise MatrixIOError(
            f"Could not write matrices to '{path}': {e}"
        ) from e

    logger.info(f"Saved {len(matrices)} matrices to '{path}' ({written} bytes)")
    return written


def load_from_file(path: str, matrices: Sequence[Matrix]) -> int:
    """
    Load matrices saved by save_to_file().

    Bytes left over after the last matrix do not fail the load but are
    reported as a warning, since they usually mean the shapes passed in
    don't match what was saved.

    Args:
        path: Source file path
        matrices: Target matrices, shaped as when they were saved

    Returns:
        int: Number of bytes read

    Raises:
        MatrixIOError: If the file is missing, unreadable or too short

    Example:
        >>> weights, biases = Matrix(30, 784), Matrix(30, 1)
        >>> load_from_file('models/layer1.bin', [weights, biases])
        94200
    """
    try:
        with open(path, 'rb') as f:
            read = load_matrices(matrices, f)
            leftover = len(f.read())
    except MatrixIOError:
        raise
    except OSError as e:
        logger.error(f"Could not read matrices from '{path}': {e}")
        raise MatrixIOError(
            f"Could not read matrices from '{path}': {e}"
        ) from e

    if leftover:
        logger.warning(
            f"'{path}' has {leftover} unread bytes after "
            f"{len(matrices)} matrices"
        )

    logger.info(f"Loaded {len(matrices)} matrices from '{path}' ({read} bytes)")
    return read
