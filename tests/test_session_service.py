"""세션 관리자 테스트 — 발급, 회전, 폐기 상태 기계.

Session manager tests against in-memory store and user lookup doubles.
Covers single-use rotation, replay rejection, revocation idempotency,
revoke-all isolation between users, and expiry at both the signed-claim
and the store-record level.
"""

import logging
from datetime import timedelta

import pytest

from app.config import TokenConfig
from app.services.ports import RefreshTokenRecord, TokenStoreError
from app.services.session_service import SessionManager, TokenPair
from app.utils.exceptions import AuthError, AuthErrorKind
from app.utils.jwt import AccessTokenCodec, RefreshTokenCodec
from tests.fakes import FakeUser, FrozenClock, InMemoryRefreshTokenStore, InMemoryUserLookup

CONFIG = TokenConfig(
    access_secret="access-secret-0123456789abcdefghijklmnop",
    refresh_secret="refresh-secret-0123456789abcdefghijklmno",
    access_ttl=timedelta(minutes=15),
    refresh_ttl=timedelta(days=7),
)


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def alice() -> FakeUser:
    return FakeUser(name="Alice", email="alice@example.com")


@pytest.fixture
def bob() -> FakeUser:
    return FakeUser(name="Bob", email="bob@example.com")


@pytest.fixture
def store(clock: FrozenClock) -> InMemoryRefreshTokenStore:
    return InMemoryRefreshTokenStore(clock)


@pytest.fixture
def users(alice: FakeUser, bob: FakeUser) -> InMemoryUserLookup:
    return InMemoryUserLookup(alice, bob)


@pytest.fixture
def sessions(
    clock: FrozenClock,
    store: InMemoryRefreshTokenStore,
    users: InMemoryUserLookup,
) -> SessionManager:
    return SessionManager(
        access_codec=AccessTokenCodec(CONFIG, clock),
        refresh_codec=RefreshTokenCodec(CONFIG, clock),
        store=store,
        users=users,
    )


def only_record(store: InMemoryRefreshTokenStore) -> RefreshTokenRecord:
    assert len(store.records) == 1
    return next(iter(store.records.values()))


async def assert_rotation_fails(sessions: SessionManager, token: str, kind: AuthErrorKind) -> None:
    with pytest.raises(AuthError) as exc_info:
        await sessions.rotate(token)
    assert exc_info.value.kind is kind


class TestIssue:
    """토큰 발급 테스트."""

    async def test_issue_pair(self, sessions: SessionManager, store, alice):
        """액세스/리프레시 쌍 발급, 레코드 1건 생성."""
        pair = await sessions.issue(alice)
        assert isinstance(pair, TokenPair)
        assert sessions.verify_access_token(pair.access_token).subject == alice.id
        assert sessions.verify_refresh_token(pair.refresh_token).subject == alice.id
        record = only_record(store)
        assert record.user_id == alice.id
        assert record.is_revoked is False

    async def test_access_lifetime_exact(self, sessions: SessionManager, alice):
        """액세스 토큰 exp - iat == 설정 수명(초)."""
        claims = sessions.verify_access_token(sessions.sign_access_token(alice))
        assert claims.subject == alice.id
        assert claims.expires_at - claims.issued_at == int(CONFIG.access_ttl.total_seconds())

    async def test_refresh_lifetime_exact(self, sessions: SessionManager, store, alice):
        """리프레시 토큰 exp - iat == 설정 수명, 레코드 만료와 일치."""
        token = await sessions.issue_refresh_token(alice)
        claims = sessions.verify_refresh_token(token)
        assert claims.subject == alice.id
        assert claims.expires_at - claims.issued_at == int(CONFIG.refresh_ttl.total_seconds())
        record = only_record(store)
        assert record.id == claims.token_id
        assert int(record.expires_at.timestamp()) == claims.expires_at

    async def test_raw_token_not_stored(self, sessions: SessionManager, store, alice):
        """저장소에는 원본 토큰이 아닌 해시만 저장."""
        token = await sessions.issue_refresh_token(alice)
        record = only_record(store)
        assert record.token_hash != token
        assert len(record.token_hash) == 64

    async def test_verify_access_rejects_garbage(self, sessions: SessionManager):
        """잘못된 액세스 토큰은 AuthError."""
        with pytest.raises(AuthError) as exc_info:
            sessions.verify_access_token("garbage-not-a-jwt")
        assert exc_info.value.kind is AuthErrorKind.TOKEN_INVALID


class TestRotate:
    """리프레시 토큰 회전 테스트."""

    async def test_rotation_is_single_use(self, sessions: SessionManager, alice):
        """같은 토큰으로 두 번 회전하면 정확히 한 번만 성공."""
        pair = await sessions.issue(alice)
        await sessions.rotate(pair.refresh_token)
        await assert_rotation_fails(sessions, pair.refresh_token, AuthErrorKind.REVOKED)

    async def test_rotation_changes_token(self, sessions: SessionManager, alice):
        """새 리프레시 토큰은 이전과 다르며 다시 회전 가능."""
        pair = await sessions.issue(alice)
        rotated = await sessions.rotate(pair.refresh_token)
        assert rotated.refresh_token != pair.refresh_token
        again = await sessions.rotate(rotated.refresh_token)
        assert again.refresh_token != rotated.refresh_token

    async def test_rotation_revokes_old_record(self, sessions: SessionManager, store, alice):
        """회전 후 이전 레코드는 폐기, 새 레코드 생성."""
        pair = await sessions.issue(alice)
        old_id = sessions.verify_refresh_token(pair.refresh_token).token_id
        rotated = await sessions.rotate(pair.refresh_token)
        new_id = sessions.verify_refresh_token(rotated.refresh_token).token_id
        assert store.records[old_id].is_revoked is True
        assert store.records[new_id].is_revoked is False

    async def test_rotated_access_token_has_full_claims(self, sessions: SessionManager, alice):
        """회전으로 발급된 액세스 토큰에 이메일/이름 포함."""
        pair = await sessions.issue(alice)
        rotated = await sessions.rotate(pair.refresh_token)
        claims = sessions.verify_access_token(rotated.access_token)
        assert claims.subject == alice.id
        assert claims.email == alice.email
        assert claims.name == alice.name

    async def test_rotation_picks_up_profile_changes(self, sessions: SessionManager, alice):
        """회전 시 최신 사용자 정보로 클레임 재구성."""
        pair = await sessions.issue(alice)
        alice.name = "Alice Renamed"
        rotated = await sessions.rotate(pair.refresh_token)
        assert sessions.verify_access_token(rotated.access_token).name == "Alice Renamed"

    async def test_garbage_token(self, sessions: SessionManager):
        """JWT 가 아닌 토큰은 TOKEN_INVALID."""
        await assert_rotation_fails(sessions, "garbage-not-a-jwt", AuthErrorKind.TOKEN_INVALID)

    async def test_access_token_cannot_rotate(self, sessions: SessionManager, alice):
        """액세스 토큰으로 회전 불가."""
        pair = await sessions.issue(alice)
        await assert_rotation_fails(sessions, pair.access_token, AuthErrorKind.TOKEN_INVALID)

    async def test_unknown_record(self, sessions: SessionManager, alice):
        """서명은 유효하나 저장소에 없는 토큰은 NOT_FOUND."""
        token, _ = sessions.refresh_codec.sign(alice.id, alice.id)
        await assert_rotation_fails(sessions, token, AuthErrorKind.NOT_FOUND)

    async def test_signed_expiry_enforced(self, sessions: SessionManager, store, clock, alice):
        """서명된 exp 경과 시 레코드가 유효해도 거부."""
        pair = await sessions.issue(alice)
        record = only_record(store)
        # 레코드는 미래까지 유효 — store record still valid
        store.expire(record.id, clock() + timedelta(days=365))
        clock.advance(CONFIG.refresh_ttl + timedelta(seconds=1))
        await assert_rotation_fails(sessions, pair.refresh_token, AuthErrorKind.TOKEN_EXPIRED)
        assert store.records[record.id].is_revoked is False

    async def test_record_expiry_enforced(self, sessions: SessionManager, store, clock, alice):
        """저장소 레코드 만료 시 서명이 유효해도 거부."""
        pair = await sessions.issue(alice)
        record = only_record(store)
        store.expire(record.id, clock() - timedelta(seconds=1))
        await assert_rotation_fails(sessions, pair.refresh_token, AuthErrorKind.EXPIRED)

    async def test_deleted_user(self, sessions: SessionManager, users, store, alice):
        """사용자가 삭제되면 USER_NOT_FOUND, 레코드는 그대로."""
        pair = await sessions.issue(alice)
        del users.users[alice.id]
        await assert_rotation_fails(sessions, pair.refresh_token, AuthErrorKind.USER_NOT_FOUND)
        assert only_record(store).is_revoked is False

    async def test_lost_revocation_race(self, sessions: SessionManager, store, alice):
        """조회 후 다른 요청이 먼저 폐기하면 REVOKED, 새 토큰 미발급."""
        pair = await sessions.issue(alice)
        record = only_record(store)
        stale = record

        async def stale_find(token_hash, token_id):
            # 동시 회전이 먼저 폐기 — a concurrent rotation revoked it after our read
            await store.revoke_by_id(token_id)
            return stale

        store.find_by_hash_and_id = stale_find
        await assert_rotation_fails(sessions, pair.refresh_token, AuthErrorKind.REVOKED)
        assert len(store.records) == 1

    async def test_full_scenario(self, sessions: SessionManager, alice):
        """등록 → 회전 → 재사용 거부 → 새 토큰 회전."""
        first = await sessions.issue(alice)
        access1, refresh1 = first.access_token, first.refresh_token
        second = await sessions.rotate(refresh1)
        assert second.refresh_token != refresh1
        await assert_rotation_fails(sessions, refresh1, AuthErrorKind.REVOKED)
        third = await sessions.rotate(second.refresh_token)
        assert third.refresh_token not in (refresh1, second.refresh_token)
        assert sessions.verify_access_token(third.access_token).subject == alice.id
        assert sessions.verify_access_token(access1).subject == alice.id


class TestRevoke:
    """리프레시 토큰 폐기 테스트."""

    async def test_revoke_single(self, sessions: SessionManager, alice):
        """폐기 후 회전 불가."""
        pair = await sessions.issue(alice)
        assert await sessions.revoke(pair.refresh_token) is None
        await assert_rotation_fails(sessions, pair.refresh_token, AuthErrorKind.REVOKED)

    async def test_revoke_single_leaves_other_sessions(self, sessions: SessionManager, alice):
        """단일 폐기는 같은 사용자의 다른 토큰에 영향 없음."""
        first = await sessions.issue(alice)
        second = await sessions.issue(alice)
        await sessions.revoke(first.refresh_token)
        await sessions.rotate(second.refresh_token)

    async def test_revoke_is_idempotent(self, sessions: SessionManager, alice):
        """이미 폐기된 토큰 재폐기도 예외 없음."""
        pair = await sessions.issue(alice)
        assert await sessions.revoke(pair.refresh_token) is None
        result = await sessions.revoke(pair.refresh_token)
        assert isinstance(result, AuthError)
        assert result.kind is AuthErrorKind.REVOKED

    async def test_revoke_garbage(self, sessions: SessionManager, store, alice):
        """JWT 가 아닌 토큰 — 예외 없음, 저장소 변화 없음."""
        await sessions.issue(alice)
        before = dict(store.records)
        result = await sessions.revoke("garbage-not-a-jwt")
        assert isinstance(result, AuthError)
        assert result.kind is AuthErrorKind.TOKEN_INVALID
        assert store.records == before

    async def test_revoke_expired_token(self, sessions: SessionManager, store, clock, alice):
        """만료된 토큰도 서명만 유효하면 폐기."""
        pair = await sessions.issue(alice)
        clock.advance(CONFIG.refresh_ttl * 2)
        assert await sessions.revoke(pair.refresh_token) is None
        assert only_record(store).is_revoked is True

    async def test_revoke_all(self, sessions: SessionManager, alice, bob):
        """revoke_all 은 해당 사용자의 모든 토큰만 무효화."""
        alice_tokens = [await sessions.issue(alice) for _ in range(3)]
        bob_pair = await sessions.issue(bob)

        assert await sessions.revoke(alice_tokens[0].refresh_token, revoke_all=True) is None

        for pair in alice_tokens:
            await assert_rotation_fails(sessions, pair.refresh_token, AuthErrorKind.REVOKED)
        rotated = await sessions.rotate(bob_pair.refresh_token)
        assert sessions.verify_access_token(rotated.access_token).subject == bob.id

    async def test_revoke_all_with_already_rotated_token(self, sessions: SessionManager, alice):
        """이미 회전된 토큰으로도 전체 로그아웃 가능."""
        pair = await sessions.issue(alice)
        rotated = await sessions.rotate(pair.refresh_token)
        assert await sessions.revoke(pair.refresh_token, revoke_all=True) is None
        await assert_rotation_fails(sessions, rotated.refresh_token, AuthErrorKind.REVOKED)

    @pytest.mark.parametrize("revoke_all", [False, True])
    async def test_revoke_store_failure_is_returned(
        self, sessions: SessionManager, store, alice, monkeypatch, caplog, revoke_all: bool
    ):
        """저장소 오류도 예외 없이 결과값으로 반환, 로그 기록."""
        pair = await sessions.issue(alice)

        async def broken(*args, **kwargs):
            raise TokenStoreError("store unavailable")

        monkeypatch.setattr(store, "find_by_hash_and_id", broken)
        monkeypatch.setattr(store, "revoke_all_for_user", broken)

        with caplog.at_level(logging.ERROR, logger="app.services.session_service"):
            result = await sessions.revoke(pair.refresh_token, revoke_all=revoke_all)

        assert isinstance(result, TokenStoreError)
        assert "store failed during revocation" in caplog.text
        assert pair.refresh_token not in caplog.text
        assert only_record(store).is_revoked is False
