"""테스트 더블 — 인메모리 리프레시 토큰 저장소, 사용자 조회, 고정 시계.

Test doubles for the session subsystem ports: an in-memory refresh token
store, an in-memory user lookup, and a manually advanced clock.
"""

import dataclasses
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from uuid import UUID, uuid4

from app.services.ports import RefreshTokenRecord, TokenStoreError


@dataclass
class FakeUser:
    name: str = "Jane Doe"
    email: str = "jane@example.com"
    id: UUID = field(default_factory=uuid4)


class FrozenClock:
    """수동으로 진행하는 시계 (Clock that only moves when told to)."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current: datetime = start or datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.current

    def advance(self, delta: timedelta) -> None:
        self.current += delta


class InMemoryRefreshTokenStore:
    """RefreshTokenStore 인메모리 구현 (In-memory RefreshTokenStore)."""

    def __init__(self, clock: FrozenClock) -> None:
        self.records: dict[UUID, RefreshTokenRecord] = {}
        self._clock = clock

    async def insert(
        self,
        *,
        record_id: UUID,
        user_id: UUID,
        token_hash: str,
        expires_at: datetime,
    ) -> RefreshTokenRecord:
        if record_id in self.records or any(
            r.token_hash == token_hash for r in self.records.values()
        ):
            raise TokenStoreError("Refresh token record collision")
        record = RefreshTokenRecord(
            id=record_id,
            user_id=user_id,
            token_hash=token_hash,
            is_revoked=False,
            expires_at=expires_at,
            created_at=self._clock(),
        )
        self.records[record_id] = record
        return record

    async def find_by_hash_and_id(self, token_hash: str, token_id: UUID) -> RefreshTokenRecord | None:
        record = self.records.get(token_id)
        if record is None or record.token_hash != token_hash:
            return None
        return record

    async def revoke_by_id(self, token_id: UUID) -> bool:
        record = self.records.get(token_id)
        if record is None or record.is_revoked:
            return False
        self.records[token_id] = dataclasses.replace(record, is_revoked=True)
        return True

    async def revoke_all_for_user(self, user_id: UUID) -> int:
        count = 0
        for record in list(self.records.values()):
            if record.user_id == user_id and not record.is_revoked:
                self.records[record.id] = dataclasses.replace(record, is_revoked=True)
                count += 1
        return count

    def expire(self, token_id: UUID, at: datetime) -> None:
        """레코드 만료 시각을 강제로 변경합니다 (Force a record's expiry)."""
        self.records[token_id] = dataclasses.replace(self.records[token_id], expires_at=at)


class InMemoryUserLookup:
    """UserLookup 인메모리 구현 (In-memory UserLookup)."""

    def __init__(self, *users: FakeUser) -> None:
        self.users: dict[UUID, FakeUser] = {u.id: u for u in users}

    async def find_by_id(self, user_id: UUID) -> FakeUser | None:
        return self.users.get(user_id)
