from .processor import process_records, process_workbook, to_json

__all__ = [
    "process_records",
    "process_workbook",
    "to_json",
]
