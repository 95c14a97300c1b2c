"""
gui - PySide6 Interface for the Rule-based Batch Rename Tool
"""

from .gui_entry import main

__all__ = ["main"]
