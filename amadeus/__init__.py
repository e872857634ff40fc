"""SQLite access with a compact binary serialization for values, fields, rows, results and queries."""

__version__ = "0.1.0"

__all__ = [
    "appinfo",
    "compression",
    "database",
    "field",
    "query",
    "result",
    "row",
    "stmt",
    "utils",
    "value",
]