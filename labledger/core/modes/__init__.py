from .models import LogicalTable, ModeConfig, TableSpec
from .registry import ModeRegistry

__all__ = [
    "LogicalTable",
    "ModeConfig",
    "ModeRegistry",
    "TableSpec",
]
