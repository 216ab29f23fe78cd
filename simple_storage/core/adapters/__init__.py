"""Alternative calling conventions over SimpleStorage."""

from .callbacks import CallbackStorage
from .table_view import TableView

__all__ = ["CallbackStorage", "TableView"]
