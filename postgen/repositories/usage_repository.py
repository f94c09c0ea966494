from __future__ import annotations

from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from postgen.domain.enums import IdentityKind
from postgen.domain.usage_model import GenerationUsage

_UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class UsageRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    def _insert(self):
        dialect = self.session.get_bind().dialect.name
        try:
            return _UPSERT_DIALECTS[dialect](GenerationUsage)
        except KeyError:
            raise RuntimeError(f"Unsupported database dialect for usage tracking: {dialect}")

    def _identity_filter(self, kind: IdentityKind, identity: str):
        return (
            GenerationUsage.identity_kind == kind,
            GenerationUsage.identity == identity,
        )

    async def ensure(self, kind: IdentityKind, identity: str) -> None:
        stmt = (
            self._insert()
            .values(identity_kind=kind, identity=identity, generation_count=0)
            .on_conflict_do_nothing(index_elements=["identity_kind", "identity"])
        )
        await self.session.execute(stmt)

    async def get_count(self, kind: IdentityKind, identity: str) -> int:
        stmt = select(GenerationUsage.generation_count).where(*self._identity_filter(kind, identity))
        result = await self.session.execute(stmt)
        return int(result.scalar_one_or_none() or 0)

    async def increment_if_below(self, kind: IdentityKind, identity: str, limit: int) -> Optional[int]:
        """Single conditional UPDATE; ``None`` means the row is already at ``limit``."""
        stmt = (
            update(GenerationUsage)
            .where(
                *self._identity_filter(kind, identity),
                GenerationUsage.generation_count < limit,
            )
            .values(generation_count=GenerationUsage.generation_count + 1)
            .returning(GenerationUsage.generation_count)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        count = result.scalar_one_or_none()
        return None if count is None else int(count)

    async def increment(self, kind: IdentityKind, identity: str) -> int:
        stmt = (
            update(GenerationUsage)
            .where(*self._identity_filter(kind, identity))
            .values(generation_count=GenerationUsage.generation_count + 1)
            .returning(GenerationUsage.generation_count)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return int(result.scalar_one())

    async def decrement(self, kind: IdentityKind, identity: str) -> int:
        stmt = (
            update(GenerationUsage)
            .where(
                *self._identity_filter(kind, identity),
                GenerationUsage.generation_count > 0,
            )
            .values(generation_count=GenerationUsage.generation_count - 1)
            .returning(GenerationUsage.generation_count)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        count = result.scalar_one_or_none()
        if count is None:
            return await self.get_count(kind, identity)
        return int(count)
