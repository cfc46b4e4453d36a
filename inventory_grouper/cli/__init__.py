from .__main__ import main, process_files

__all__ = ["main", "process_files"]
