"""
Switchboard Utilities

Common utilities used across the application.
"""

from .json_parser import (
    clean_json_string,
    coerce_probability,
    extract_json_from_text,
    parse_detection_json,
    parse_json_safely,
)
from .text import clean_markup, count_words, min_required_words

__all__ = [
    "clean_json_string",
    "clean_markup",
    "coerce_probability",
    "count_words",
    "extract_json_from_text",
    "min_required_words",
    "parse_detection_json",
    "parse_json_safely",
]
