"""Export — JSON configuration/geometry files and CSV placement tables."""

from collsim.export.csv_export import CsvExporter
from collsim.export.json_export import JsonExporter

__all__ = [
    "CsvExporter",
    "JsonExporter",
]
