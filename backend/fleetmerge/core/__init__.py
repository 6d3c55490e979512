from .table import Cell, Row, Table

__all__ = ["Cell", "Row", "Table"]
