"""Service exports."""

from .export_service import export_csv, write_csv

__all__ = ["export_csv", "write_csv"]
