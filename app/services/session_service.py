"""세션 관리 서비스 — 토큰 발급, 회전, 폐기의 상태 기계.

Session Manager — issue, rotate and revoke token pairs.

Refresh-token lineage states: ISSUED -> ROTATED | REVOKED | EXPIRED.
A rotated token is recorded as revoked, so a replayed token fails exactly
like an explicitly revoked one. Rotation always revokes the old record
before issuing the new pair; a crash in between leaves the user logged
out rather than holding two valid tokens.

All collaborators are injected. The manager never reads global settings.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from uuid import UUID, uuid4

from app.services.ports import RefreshTokenRecord, RefreshTokenStore, TokenSubject, UserLookup
from app.utils.exceptions import AuthError, AuthErrorKind
from app.utils.jwt import (
    AccessTokenClaims,
    AccessTokenCodec,
    RefreshTokenClaims,
    RefreshTokenCodec,
    hash_token,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TokenPair:
    """액세스/리프레시 토큰 쌍 (Access and refresh token pair)."""

    access_token: str
    refresh_token: str


class SessionManager:
    """토큰 세션 관리자.

    Coordinates the access codec, refresh codec, refresh token store and
    user lookup.

    Args:
        access_codec: 액세스 토큰 코덱 (Access token codec)
        refresh_codec: 리프레시 토큰 코덱 (Refresh token codec)
        store: 리프레시 토큰 저장소 (Refresh token store)
        users: 사용자 조회 능력 (User lookup used to hydrate rotated claims)
    """

    def __init__(
        self,
        access_codec: AccessTokenCodec,
        refresh_codec: RefreshTokenCodec,
        store: RefreshTokenStore,
        users: UserLookup,
    ) -> None:
        self.access_codec: AccessTokenCodec = access_codec
        self.refresh_codec: RefreshTokenCodec = refresh_codec
        self.store: RefreshTokenStore = store
        self.users: UserLookup = users

    def sign_access_token(self, user: TokenSubject) -> str:
        return self.access_codec.sign(user)

    def verify_access_token(self, token: str) -> AccessTokenClaims:
        """액세스 토큰 검증 (Verify an access token).

        Raises:
            AuthError: TOKEN_INVALID 또는 TOKEN_EXPIRED
        """
        try:
            return self.access_codec.verify(token)
        except AuthError as exc:
            logger.info("Access token rejected: %s", exc.kind.value)
            raise

    async def issue_refresh_token(self, user: TokenSubject) -> str:
        """리프레시 토큰을 서명하고 저장소 레코드를 생성합니다.

        Sign a refresh token and persist its store record.
        The record expiry mirrors the signed ``exp`` claim.

        Args:
            user: 토큰 주체 (Token subject)

        Returns:
            str: 서명된 리프레시 토큰 (Signed refresh token)
        """
        token_id: UUID = uuid4()
        token, claims = self.refresh_codec.sign(user.id, token_id)
        await self.store.insert(
            record_id=token_id,
            user_id=user.id,
            token_hash=hash_token(token),
            expires_at=datetime.fromtimestamp(claims.expires_at, tz=timezone.utc),
        )
        return token

    def verify_refresh_token(self, token: str) -> RefreshTokenClaims:
        return self.refresh_codec.verify(token)

    async def issue(self, user: TokenSubject) -> TokenPair:
        """새 토큰 쌍을 발급합니다 (Issue a fresh token pair).

        Called at registration, at login, and as the second half of rotation.
        """
        access_token: str = self.sign_access_token(user)
        refresh_token: str = await self.issue_refresh_token(user)
        return TokenPair(access_token=access_token, refresh_token=refresh_token)

    async def rotate(self, old_token: str) -> TokenPair:
        """리프레시 토큰을 새 토큰 쌍으로 교환합니다 (1회용).

        Exchange a refresh token for a new pair. Each token rotates at most once.

        Args:
            old_token: 기존 리프레시 토큰 (Refresh token being exchanged)

        Returns:
            TokenPair: 새 토큰 쌍 (New token pair)

        Raises:
            AuthError: 서명/만료 실패, 레코드 없음, 폐기됨, 레코드 만료, 사용자 없음
                       (Any verification, lookup, replay or expiry failure)
        """
        try:
            return await self._rotate(old_token)
        except AuthError as exc:
            logger.warning("Refresh token rotation rejected: %s", exc.kind.value)
            raise

    async def _rotate(self, old_token: str) -> TokenPair:
        claims: RefreshTokenClaims = self.refresh_codec.verify(old_token)

        record: RefreshTokenRecord | None = await self.store.find_by_hash_and_id(
            hash_token(old_token), claims.token_id
        )
        if record is None:
            raise AuthError(AuthErrorKind.NOT_FOUND, "Refresh token not found")
        if record.is_revoked:
            raise AuthError(AuthErrorKind.REVOKED, "Refresh token revoked")
        if record.expires_at <= self.refresh_codec.now():
            raise AuthError(AuthErrorKind.EXPIRED, "Refresh token record expired")

        user: TokenSubject | None = await self.users.find_by_id(record.user_id)
        if user is None:
            raise AuthError(AuthErrorKind.USER_NOT_FOUND, "Token subject no longer exists")

        # 폐기 후 발급 — revoke strictly before issue; losing the CAS means a concurrent rotation won
        if not await self.store.revoke_by_id(record.id):
            raise AuthError(AuthErrorKind.REVOKED, "Refresh token revoked concurrently")

        return await self.issue(user)

    async def revoke(self, token: str, revoke_all: bool = False) -> Exception | None:
        """리프레시 토큰을 폐기합니다 — 예외 대신 결과값 반환.

        Revoke a refresh token, or every token of its owner.

        Only the signature is checked, so expired tokens can still be revoked.
        Nothing is raised: an authentication failure comes back as an
        :class:`AuthError`, a store failure is logged and comes back as the
        original exception. Either way the caller sees a no-op.

        Args:
            token: 리프레시 토큰 (Refresh token)
            revoke_all: 사용자의 모든 토큰 폐기 여부 (Revoke every token of the subject)

        Returns:
            Exception | None: 실패 사유 또는 None (Failure, or None on success)
        """
        try:
            claims: RefreshTokenClaims = self.refresh_codec.verify(token, verify_exp=False)
        except AuthError as exc:
            logger.info("Revocation of unverifiable token ignored: %s", exc.kind.value)
            return exc

        try:
            return await self._revoke(token, claims, revoke_all)
        except Exception as exc:
            logger.exception("Refresh token store failed during revocation for user %s", claims.subject)
            return exc

    async def _revoke(
        self,
        token: str,
        claims: RefreshTokenClaims,
        revoke_all: bool,
    ) -> AuthError | None:
        if revoke_all:
            count: int = await self.store.revoke_all_for_user(claims.subject)
            logger.info("Revoked %d refresh tokens for user %s", count, claims.subject)
            return None

        record: RefreshTokenRecord | None = await self.store.find_by_hash_and_id(
            hash_token(token), claims.token_id
        )
        if record is None or record.user_id != claims.subject:
            logger.info("Revocation target not found for user %s", claims.subject)
            return AuthError(AuthErrorKind.NOT_FOUND, "Refresh token not found")
        if not await self.store.revoke_by_id(record.id):
            return AuthError(AuthErrorKind.REVOKED, "Refresh token already revoked")
        return None
