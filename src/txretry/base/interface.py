from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional, Sequence, Set, Type


class BaseConnection(ABC):
    """A borrowed handle on one live database session.

    The wrapped driver connection stays owned by the caller. Adapters only
    expose what the transaction coordinator needs, plus a pass-through
    ``execute`` for the unit of work's own statements.
    """

    registered_connections: Set[Type[BaseConnection]] = set()

    def __init_subclass__(cls) -> None:
        BaseConnection.registered_connections.add(cls)

    def __init__(self, raw: Any) -> None:
        self._raw = raw
        self._check_driver()

    def __str__(self) -> str:
        return f"<{self.__class__.__name__} {self._raw!r}>"

    @property
    def raw(self) -> Any:
        return self._raw

    def _check_driver(self) -> None: ...

    @property
    @abstractmethod
    def autocommit(self) -> bool: ...

    @abstractmethod
    async def set_autocommit(self, value: bool) -> None: ...

    @abstractmethod
    async def commit(self) -> None: ...

    @abstractmethod
    async def rollback(self) -> None: ...

    @abstractmethod
    async def execute(
        self,
        query: str,
        params: Optional[Sequence[Any]] = None,
    ) -> Any: ...
