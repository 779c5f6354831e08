"""설정 및 기간 파서 테스트.

Settings and duration parser tests. Invalid token configuration must fail
when settings are loaded, never at request time.
"""

from datetime import timedelta

import pytest
from pydantic import ValidationError

from app.config import Settings, TokenConfig
from app.utils.duration import InvalidDurationError, parse_duration

ACCESS_SECRET = "a" * 32
REFRESH_SECRET = "r" * 32

# 테스트 환경 변수(conftest)가 기본값 검증에 섞이지 않도록 제거
_SETTINGS_ENV = (
    "BCRYPT_COST",
    "DATABASE_URL",
    "JWT_ACCESS_EXPIRES",
    "JWT_REFRESH_EXPIRES",
    "JWT_ALGORITHM",
)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _SETTINGS_ENV:
        monkeypatch.delenv(name, raising=False)


def make_settings(**overrides) -> Settings:
    values = {
        "JWT_ACCESS_SECRET": ACCESS_SECRET,
        "JWT_REFRESH_SECRET": REFRESH_SECRET,
        **overrides,
    }
    return Settings(_env_file=None, **values)


class TestParseDuration:
    """기간 문자열 파서 테스트."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("30s", timedelta(seconds=30)),
            ("15m", timedelta(minutes=15)),
            ("12h", timedelta(hours=12)),
            ("7d", timedelta(days=7)),
            ("2w", timedelta(weeks=2)),
        ],
    )
    def test_valid_units(self, text: str, expected: timedelta):
        """모든 단위 파싱."""
        assert parse_duration(text) == expected

    @pytest.mark.parametrize("text", ["", "15", "m", "15x", "1.5h", "-5m", " 15m", "15m\n", "15 m", "0s"])
    def test_invalid(self, text: str):
        """잘못된 형식과 0은 거부."""
        with pytest.raises(InvalidDurationError):
            parse_duration(text)

    def test_invalid_duration_is_value_error(self):
        """pydantic 검증 오류로 변환되도록 ValueError 하위 클래스."""
        assert issubclass(InvalidDurationError, ValueError)


class TestSettings:
    """애플리케이션 설정 검증 테스트."""

    def test_defaults(self):
        """기본 토큰 수명: 15분 / 7일."""
        settings = make_settings()
        assert settings.JWT_ACCESS_EXPIRES == timedelta(minutes=15)
        assert settings.JWT_REFRESH_EXPIRES == timedelta(days=7)
        assert settings.BCRYPT_COST == 11

    def test_duration_strings_parsed_at_load(self):
        """기간 문자열은 로드 시 timedelta 로 변환."""
        settings = make_settings(JWT_ACCESS_EXPIRES="5m", JWT_REFRESH_EXPIRES="1w")
        assert settings.JWT_ACCESS_EXPIRES == timedelta(minutes=5)
        assert settings.JWT_REFRESH_EXPIRES == timedelta(weeks=1)

    def test_malformed_duration_rejected(self):
        """잘못된 기간 문자열은 시작 오류."""
        with pytest.raises(ValidationError):
            make_settings(JWT_ACCESS_EXPIRES="fifteen minutes")

    @pytest.mark.parametrize("ttl", [timedelta(0), timedelta(seconds=-30)])
    def test_non_positive_timedelta_rejected(self, ttl: timedelta):
        """timedelta 로 전달된 0 이하 기간도 거부."""
        with pytest.raises(ValidationError):
            make_settings(JWT_ACCESS_EXPIRES=ttl)
        with pytest.raises(ValidationError):
            make_settings(JWT_REFRESH_EXPIRES=ttl)

    def test_environment_overrides_defaults(self, monkeypatch: pytest.MonkeyPatch):
        """환경 변수 값이 기본값보다 우선."""
        monkeypatch.setenv("BCRYPT_COST", "12")
        monkeypatch.setenv("JWT_ACCESS_EXPIRES", "30s")
        settings = make_settings()
        assert settings.BCRYPT_COST == 12
        assert settings.JWT_ACCESS_EXPIRES == timedelta(seconds=30)

    def test_short_secret_rejected(self):
        """32자 미만 비밀키 거부."""
        with pytest.raises(ValidationError):
            make_settings(JWT_ACCESS_SECRET="too-short")

    def test_identical_secrets_rejected(self):
        """액세스/리프레시 비밀키가 같으면 거부."""
        with pytest.raises(ValidationError):
            make_settings(JWT_REFRESH_SECRET=ACCESS_SECRET)

    @pytest.mark.parametrize("cost", [9, 16])
    def test_bcrypt_cost_out_of_range(self, cost: int):
        """bcrypt 비용 인자 범위 10~15."""
        with pytest.raises(ValidationError):
            make_settings(BCRYPT_COST=cost)

    def test_token_config_is_immutable(self):
        """TokenConfig 는 불변 값."""
        config = make_settings(JWT_ACCESS_EXPIRES="10m").token_config
        assert config == TokenConfig(
            access_secret=ACCESS_SECRET,
            refresh_secret=REFRESH_SECRET,
            access_ttl=timedelta(minutes=10),
            refresh_ttl=timedelta(days=7),
        )
        with pytest.raises(AttributeError):
            config.access_secret = "x" * 32  # type: ignore[misc]
