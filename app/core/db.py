from collections.abc import AsyncGenerator

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession


class Database:
    """Owns the async engine; handed to the app factory and disposed on shutdown."""

    def __init__(self, url: str | None = None, *, engine: AsyncEngine | None = None) -> None:
        if engine is None:
            if url is None:
                msg = "Either url or engine is required"
                raise ValueError(msg)
            engine = create_async_engine(url)
        self.engine = engine

    def session(self) -> AsyncSession:
        return AsyncSession(self.engine, autocommit=False, autoflush=False, expire_on_commit=False)

    async def create_all(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()


async def get_db(request: Request) -> AsyncGenerator[AsyncSession]:
    database: Database = request.app.state.db
    async with database.session() as session:
        yield session
