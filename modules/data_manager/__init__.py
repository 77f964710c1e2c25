"""
Data Manager Module
===================

Responsibility:
- Loading of element attribute CSV files (header row, comma separated).
- Validation of the element schema columns.
- Normalisation of missing cells to empty strings.
- Label distribution reporting.
"""

from .data_manager import DataManager

__all__ = ['DataManager']
