"""
formatting.py
~~~~~~~~~~~~~

Human-readable rendering of matrix values.

Each value is rounded half-even to a fixed number of fraction digits,
trailing zeros are dropped, and a zero integer part is omitted, so
0.5 renders as ``.5`` and 2.0 renders as ``2``. The output is meant for
eyeballing weights while debugging, not for parsing back.
"""

import math
from decimal import Context, Decimal, ROUND_HALF_EVEN
from typing import Iterable, List

from nnmatrix.config import PRINT_DECIMALS

# Enough digits to hold the integer part of the largest double plus the
# fraction digits.
_DECIMAL_PRECISION = 330


class ValueFormatter:
    """
    Formats floats with at most ``decimals`` fraction digits.

    Instances are cheap; build one per rendering instead of sharing a
    module-level formatter between threads.
    """

    def __init__(self, decimals: int = PRINT_DECIMALS):
        if decimals < 0:
            raise ValueError(f"decimals must be non-negative, got {decimals}")
        self.decimals = decimals
        self._quantum = Decimal(1).scaleb(-decimals)
        self._context = Context(
            prec=_DECIMAL_PRECISION,
            rounding=ROUND_HALF_EVEN
        )

    def format(self, value: float) -> str:
        """
        Render one value.

        Args:
            value: The number to format

        Returns:
            str: e.g. '19', '.33333', '-1.5', '-0'
        """
        value = float(value)
        if math.isnan(value):
            return 'NaN'
        if math.isinf(value):
            return '-∞' if value < 0 else '∞'

        negative = math.copysign(1.0, value) < 0
        # Decimal(float) is exact, so ties are judged on the true binary value
        rounded = Decimal(abs(value)).quantize(
            self._quantum, context=self._context
        )

        text = format(rounded, 'f')
        if '.' in text:
            text = text.rstrip('0').rstrip('.')
        if text.startswith('0.'):
            text = text[1:]

        return '-' + text if negative else text

    def format_row(self, values: Iterable[float]) -> str:
        """Render one matrix row as ``[ v1 v2 ... ]``."""
        parts = ['[ ']
        for value in values:
            parts.append(self.format(value))
            parts.append(' ')
        parts.append(']')
        return ''.join(parts)

    def format_rows(self, rows: Iterable[Iterable[float]]) -> List[str]:
        """Render every row, one string per row."""
        return [self.format_row(row) for row in rows]
