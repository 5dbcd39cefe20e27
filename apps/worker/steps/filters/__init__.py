from .evaluator import apply_filters, evaluate
from .expiry import derive_expiry_mode, matches_expiry
from .missing import is_missing_field, is_valid_email
from .presets import (
    GROUPS,
    PRESETS,
    apply_preset_extra_filters,
    matches_preset,
    preset_columns,
    sort_for_preset,
)
from .query_params import build_query_string, selection_to_query_params

__all__ = [
    "GROUPS",
    "PRESETS",
    "apply_filters",
    "apply_preset_extra_filters",
    "build_query_string",
    "derive_expiry_mode",
    "evaluate",
    "is_missing_field",
    "is_valid_email",
    "matches_expiry",
    "matches_preset",
    "preset_columns",
    "selection_to_query_params",
    "sort_for_preset",
]
