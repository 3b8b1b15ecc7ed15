from .interface import BaseConnection

__all__ = ("BaseConnection",)
