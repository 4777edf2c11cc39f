"""
nnmatrix package
~~~~~~~~~~~~~~~~

Dense float32 matrices for feed-forward neural network computation.
Contains the Matrix type, its error hierarchy, text rendering and
binary persistence helpers.
"""

import logging

from nnmatrix.exceptions import (
    MatrixError,
    MatrixIOError,
    OutOfRangeError,
    ShapeMismatchError
)
from nnmatrix.matrix import Matrix
from nnmatrix.serialization import (
    load_from_file,
    load_matrices,
    payload_size,
    save_matrices,
    save_to_file
)
from nnmatrix.config import configure_logging

__version__ = "1.0.0"

__all__ = [
    "Matrix",
    "MatrixError",
    "MatrixIOError",
    "OutOfRangeError",
    "ShapeMismatchError",
    "configure_logging",
    "load_from_file",
    "load_matrices",
    "payload_size",
    "save_matrices",
    "save_to_file",
]

# Silent unless the host application configures logging
logging.getLogger(__name__).addHandler(logging.NullHandler())
