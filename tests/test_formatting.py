"""
test_formatting.py
~~~~~~~~~~~~~~~~~~

Unit tests for value formatting and Matrix.print.
"""

import io
import os
import sys

import numpy as np
import pytest

# Add repository root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from nnmatrix import Matrix
from nnmatrix.formatting import ValueFormatter


@pytest.fixture
def formatter():
    """Formatter with the default five fraction digits."""
    return ValueFormatter()


@pytest.mark.unit
class TestValueFormatter:
    """Test rendering of single values."""

    @pytest.mark.parametrize("value,expected", [
        (19.0, '19'),
        (100.0, '100'),
        (0.0, '0'),
        (0.5, '.5'),
        (-0.25, '-.25'),
        (1.5, '1.5'),
        (-2.75, '-2.75'),
        (1.000004, '1'),
        (123.456789, '123.45679'),
    ])
    def test_format(self, formatter, value, expected):
        """Test rounding to five digits and trimming zeros."""
        assert formatter.format(value) == expected

    def test_float32_thirds(self, formatter):
        """Test values that are not exact in single precision."""
        assert formatter.format(np.float32(1) / np.float32(3)) == '.33333'
        assert formatter.format(np.float32(2) / np.float32(3)) == '.66667'

    def test_negative_zero(self, formatter):
        """Test that negative values rounding to zero keep the sign."""
        assert formatter.format(-0.0) == '-0'
        assert formatter.format(-0.000001) == '-0'

    def test_tiny_positive_rounds_to_zero(self, formatter):
        """Test that small positive values render as 0."""
        assert formatter.format(0.000001) == '0'

    def test_half_even_rounding(self):
        """Test that exact ties round to the even digit."""
        two_digits = ValueFormatter(decimals=2)
        assert two_digits.format(0.125) == '.12'
        assert two_digits.format(0.375) == '.38'

        no_digits = ValueFormatter(decimals=0)
        assert no_digits.format(2.5) == '2'
        assert no_digits.format(3.5) == '4'
        assert no_digits.format(20.0) == '20'

    def test_special_values(self, formatter):
        """Test NaN and infinities."""
        assert formatter.format(float('nan')) == 'NaN'
        assert formatter.format(float('inf')) == '∞'
        assert formatter.format(float('-inf')) == '-∞'

    def test_large_value(self, formatter):
        """Test that the largest float32 renders without exponent."""
        text = formatter.format(np.finfo(np.float32).max)
        assert text.startswith('3402823466385288')
        assert 'E' not in text and 'e' not in text

    def test_negative_decimals_rejected(self):
        """Test that a negative digit count is refused."""
        with pytest.raises(ValueError):
            ValueFormatter(decimals=-1)

    def test_format_row(self, formatter):
        """Test bracketed, space separated rows."""
        assert formatter.format_row([1.0, 0.5, -3.0]) == '[ 1 .5 -3 ]'
        assert formatter.format_row([]) == '[ ]'


@pytest.mark.unit
class TestMatrixPrint:
    """Test Matrix.print and str()."""

    def test_print_to_stream(self):
        """Test one line per row written to the sink."""
        m = Matrix.from_rows([[1, 2], [3, 4.5]])
        out = io.StringIO()

        m.print(out)

        assert out.getvalue() == '[ 1 2 ]\n[ 3 4.5 ]\n'

    def test_print_defaults_to_stdout(self, capsys):
        """Test that print writes to stdout when no sink is given."""
        Matrix.from_rows([[0.25, -1]]).print()

        assert capsys.readouterr().out == '[ .25 -1 ]\n'

    def test_str(self):
        """Test that str() renders the same rows without a final newline."""
        m = Matrix.from_rows([[1], [2]])
        assert str(m) == '[ 1 ]\n[ 2 ]'

    def test_empty_rows(self):
        """Test a matrix with rows but no columns."""
        out = io.StringIO()
        Matrix(2, 0).print(out)
        assert out.getvalue() == '[ ]\n[ ]\n'

    def test_repr(self):
        """Test the short debugging representation."""
        assert repr(Matrix(3, 4)) == 'Matrix(rows=3, cols=4)'
