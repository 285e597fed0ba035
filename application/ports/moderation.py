"""Block lookup port consumed by the message relay."""
from __future__ import annotations

from typing import Callable, Protocol

from domain.common.unit_of_work import AbstractUnitOfWork


class BlockLookup(Protocol):
    async def exists(self, a: int | str, b: int | str) -> bool:
        """True when either user has blocked the other. May raise on store failure."""
        ...


class UnitOfWorkBlockLookup:
    """Checks block records through a read-only unit of work per lookup."""

    def __init__(self, uow_factory: Callable[..., AbstractUnitOfWork]) -> None:
        self._uow_factory = uow_factory

    async def exists(self, a: int | str, b: int | str) -> bool:
        async with self._uow_factory(readonly=True) as uow:
            return await uow.block_repository.exists_between(int(a), int(b))


__all__ = ["BlockLookup", "UnitOfWorkBlockLookup"]
