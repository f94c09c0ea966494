from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from postgen.domain.enums import IdentityKind
from postgen.repositories.usage_repository import UsageRepository

logger = logging.getLogger("postgen.quota_service")


@dataclass(slots=True)
class UsageResult:
    can_generate: bool
    generation_count: int
    remaining: Optional[int]
    is_authenticated: bool

    def snapshot(self) -> Dict[str, Any]:
        return {
            "generation_count": self.generation_count,
            "remaining": self.remaining,
            "is_authenticated": self.is_authenticated,
        }


def _resolve_identity(session_token: Optional[str], user_id: Optional[str]) -> Tuple[IdentityKind, str]:
    if user_id:
        return IdentityKind.user, str(user_id)
    if session_token:
        return IdentityKind.session, session_token
    raise ValueError("Either a session token or a user id is required")


def _remaining(count: int, max_free: int) -> int:
    return max(0, max_free - count)


class QuotaEnforcer:
    """Authoritative per-identity generation counter.

    Authenticated callers are never limited but are still counted. Anonymous
    callers get ``max_free`` generations; the check and the increment are one
    conditional UPDATE so concurrent requests cannot share the last slot.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.repo = UsageRepository(session)

    async def check_and_increment(
        self,
        session_token: Optional[str],
        user_id: Optional[str],
        max_free: int,
    ) -> UsageResult:
        kind, identity = _resolve_identity(session_token, user_id)

        await self.repo.ensure(kind, identity)

        if kind is IdentityKind.user:
            count = await self.repo.increment(kind, identity)
            await self.session.commit()
            logger.info(f"Generation granted to authenticated user. Count: {count}")
            return UsageResult(
                can_generate=True,
                generation_count=count,
                remaining=None,
                is_authenticated=True,
            )

        count = await self.repo.increment_if_below(kind, identity, max_free)
        if count is None:
            current = await self.repo.get_count(kind, identity)
            await self.session.commit()
            logger.info(f"Free limit reached for session. Count: {current}, Limit: {max_free}")
            return UsageResult(
                can_generate=False,
                generation_count=current,
                remaining=0,
                is_authenticated=False,
            )

        await self.session.commit()
        logger.info(f"Generation granted to session. Count: {count}, Limit: {max_free}")
        return UsageResult(
            can_generate=True,
            generation_count=count,
            remaining=_remaining(count, max_free),
            is_authenticated=False,
        )

    async def release(
        self,
        session_token: Optional[str],
        user_id: Optional[str],
        max_free: int,
    ) -> UsageResult:
        kind, identity = _resolve_identity(session_token, user_id)
        count = await self.repo.decrement(kind, identity)
        await self.session.commit()
        logger.info(f"Generation slot released. Kind: {kind.value}, Count: {count}")
        return self._snapshot(kind, count, max_free)

    async def get_usage(
        self,
        session_token: Optional[str],
        user_id: Optional[str],
        max_free: int,
    ) -> UsageResult:
        kind, identity = _resolve_identity(session_token, user_id)
        count = await self.repo.get_count(kind, identity)
        return self._snapshot(kind, count, max_free)

    @staticmethod
    def _snapshot(kind: IdentityKind, count: int, max_free: int) -> UsageResult:
        if kind is IdentityKind.user:
            return UsageResult(True, count, None, True)
        return UsageResult(count < max_free, count, _remaining(count, max_free), False)
