"""Утилиты для бота."""
from .numbers import round_half_up
from .validators import (
    parse_int_input,
    parse_weight,
    parse_date,
)

__all__ = [
    # numbers
    "round_half_up",
    # validators
    "parse_int_input",
    "parse_weight",
    "parse_date",
]
