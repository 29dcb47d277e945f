from .cell_values import (
    cell_text,
    is_blank,
    is_number,
    normalize_label,
    parse_amount,
    parse_criterion_score,
    parse_rank,
    parse_score,
    round2,
)

__all__ = [
    "cell_text",
    "is_blank",
    "is_number",
    "normalize_label",
    "parse_amount",
    "parse_criterion_score",
    "parse_rank",
    "parse_score",
    "round2",
]
