"""
Data preparation: coercion, validation and missing-value handling.
"""

from bnscore.data.missing import MissingDataResult, drop_missing_rows
from bnscore.data.validation import as_design_matrix

__all__ = [
    "MissingDataResult",
    "drop_missing_rows",
    "as_design_matrix",
]
