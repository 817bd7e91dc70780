"""Column extraction from delimited text rows."""

from colhist.parsing.column_parser import ColumnParser

__all__ = ["ColumnParser"]
