"""Utility helpers for the auditor."""

from .fileio import load_mapping, read_yaml_file, read_text_file
from .code import iter_formula_files

__all__ = [
    "load_mapping",
    "read_yaml_file",
    "read_text_file",
    "iter_formula_files",
]
