"""비밀번호 해싱 및 검증 유틸리티 모듈.

Password hashing and verification utility module.
Uses bcrypt directly for secure password storage.
Passwords are never stored in plain text — always hashed with bcrypt.
"""

import bcrypt

from app.services.ports import PasswordHasher


class BcryptPasswordHasher:
    """bcrypt 기반 PasswordHasher 구현체.

    bcrypt implementation of the :class:`PasswordHasher` capability.
    The cost factor is injected from configuration.

    Args:
        rounds: bcrypt 비용 인자 (bcrypt cost factor)
    """

    def __init__(self, rounds: int = 12) -> None:
        self.rounds: int = rounds

    def hash(self, password: str) -> str:
        """평문 비밀번호를 bcrypt 해시로 변환합니다.

        Hash a plain text password using bcrypt.
        The resulting hash includes a random salt, making each hash unique
        even for identical passwords.

        Args:
            password: 평문 비밀번호 (Plain text password to hash)

        Returns:
            str: bcrypt 해시 문자열 (Bcrypt hash string, ~60 chars)

        Example:
            hashed = hasher.hash("my-secret-password")
            # "$2b$11$LJ3m4ys3..."
        """
        salt: bytes = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    def verify(self, password: str, hashed_password: str) -> bool:
        """평문 비밀번호와 bcrypt 해시를 비교 검증합니다.

        Verify a plain text password against a bcrypt hash.
        A malformed or foreign-format hash, or a password bcrypt refuses,
        yields ``False`` rather than an exception so callers cannot tell
        "wrong password" from "corrupt hash".

        Args:
            password: 검증할 평문 비밀번호 (Plain text password to verify)
            hashed_password: 저장된 bcrypt 해시 (Stored bcrypt hash to compare against)

        Returns:
            bool: 일치하면 True, 그 외 False (True only if password matches hash)
        """
        try:
            return bcrypt.checkpw(
                password.encode("utf-8"), hashed_password.encode("utf-8")
            )
        except ValueError:
            # 잘못된 salt / 72바이트 초과 — Invalid salt or over-long password
            return False


def verify_credentials(
    hasher: PasswordHasher,
    password: str,
    stored_hash: str,
) -> bool:
    """자격 증명 검증 — 해셔에 완전히 위임합니다.

    Check a plaintext password against a stored hash via the hasher capability.
    """
    return hasher.verify(password, stored_hash)
