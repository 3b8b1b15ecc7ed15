from .interface import SQLiteConnection

__all__ = ("SQLiteConnection",)
