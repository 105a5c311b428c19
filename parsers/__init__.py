"""
File parsers module.
"""

from parsers.reference_csv_parser import (
    parse_reference_csv,
    split_csv_line,
)

__all__ = [
    "parse_reference_csv",
    "split_csv_line",
]
