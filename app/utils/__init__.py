"""Utility functions and helpers."""

from app.utils.export import export_filename, export_to_csv, export_to_json
from app.utils.sanitizer import clean_description

__all__ = [
    "export_filename",
    "export_to_csv",
    "export_to_json",
    "clean_description",
]
