"""Repositories and unit of work against an in-memory SQLite database."""
import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from application.ports.moderation import UnitOfWorkBlockLookup
from application.services.chat_service import ChatApplicationService
from domain.moderation.entity import BlockRecord
from infrastructure.models import Base, UserModel
from infrastructure.unit_of_work import SQLAlchemyUnitOfWork


async def _uow_factory():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    session_factory = async_sessionmaker(bind=engine, expire_on_commit=False)

    async with session_factory() as session:
        session.add_all([UserModel(id=1, name="Asha"), UserModel(id=2, name="Ravi"), UserModel(id=3)])
        await session.commit()

    def factory(*, readonly: bool = False) -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(session_factory=session_factory, readonly=readonly)

    return factory, engine


@pytest.mark.asyncio
async def test_block_lookup_is_symmetric():
    factory, engine = await _uow_factory()
    try:
        lookup = UnitOfWorkBlockLookup(factory)
        assert await lookup.exists(1, 2) is False

        async with factory() as uow:
            await uow.block_repository.create(BlockRecord(id=None, user_id=1, target_id=2))

        assert await lookup.exists(1, 2) is True
        assert await lookup.exists("2", "1") is True
        assert await lookup.exists(1, 3) is False
    finally:
        await engine.dispose()


@pytest.mark.asyncio
async def test_non_numeric_id_raises_from_lookup():
    factory, engine = await _uow_factory()
    try:
        with pytest.raises(ValueError):
            await UnitOfWorkBlockLookup(factory).exists("abc", 2)
    finally:
        await engine.dispose()


@pytest.mark.asyncio
async def test_chat_flow_through_sqlalchemy():
    factory, engine = await _uow_factory()
    try:
        service = ChatApplicationService(uow_factory=factory)
        await service.send(2, 1, "hello")
        await service.send(1, 2, "hi back")
        await service.send(3, 1, "ping")

        chats = await service.list_conversations(1)
        by_id = {c.id: c for c in chats}
        assert by_id[2].name == "Ravi"
        assert by_id[2].unread_count == 1
        assert by_id[3].unread_count == 1

        assert await service.mark_read(1, 2) == 1
        assert [m.message for m in await service.history(2, 1)] == ["hello", "hi back"]

        async with factory() as uow:
            removed = await uow.message_repository.delete_between(1, 2)
        assert removed == 2
        assert [c.id for c in await service.list_conversations(1)] == [3]
    finally:
        await engine.dispose()


@pytest.mark.asyncio
async def test_rolled_back_unit_of_work_persists_nothing():
    factory, engine = await _uow_factory()
    try:
        with pytest.raises(RuntimeError):
            async with factory() as uow:
                await uow.block_repository.create(BlockRecord(id=None, user_id=1, target_id=2))
                raise RuntimeError("boom")

        assert await UnitOfWorkBlockLookup(factory).exists(1, 2) is False
    finally:
        await engine.dispose()
