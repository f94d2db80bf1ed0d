"""
Dynamic Bayesian networks: slice unrolling and index maps.
"""

from bnscore.dynamic.index_maps import (
    IndexMap,
    IndexMaps,
    compute_index_maps,
    first_slice_column_order,
    stacked_slice_columns,
    transition_column_order,
)

__all__ = [
    "IndexMap",
    "IndexMaps",
    "compute_index_maps",
    "first_slice_column_order",
    "stacked_slice_columns",
    "transition_column_order",
]
