from .interface import PostgresConnection

__all__ = ("PostgresConnection",)
