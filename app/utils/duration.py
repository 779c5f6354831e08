"""기간 문자열 파서 모듈.

Duration string parser used for token lifetimes ("15m", "7d").

Grammar:
    <duration> ::= <integer><unit>
    <unit>     ::= "s" | "m" | "h" | "d" | "w"
"""

import re
from datetime import timedelta

_DURATION_RE = re.compile(r"([0-9]+)([smhdw])")

# 단위별 초 — Seconds per unit
_UNIT_SECONDS: dict[str, int] = {
    "s": 1,
    "m": 60,
    "h": 60 * 60,
    "d": 24 * 60 * 60,
    "w": 7 * 24 * 60 * 60,
}


class InvalidDurationError(ValueError):
    """기간 문자열 형식 오류.

    Raised when a duration string does not match ``<integer><unit>``.
    """


def parse_duration(text: str) -> timedelta:
    """기간 문자열을 timedelta로 변환합니다.

    Parse a duration string such as ``"15m"`` or ``"7d"`` into a timedelta.

    Args:
        text: 기간 문자열 (Duration string)

    Returns:
        timedelta: 파싱된 기간 (Parsed duration)

    Raises:
        InvalidDurationError: 형식이 잘못되었거나 0일 때 (Malformed or zero duration)
    """
    match = _DURATION_RE.fullmatch(text)
    if match is None:
        raise InvalidDurationError(f"Invalid duration format: {text!r}")

    value: int = int(match.group(1))
    if value == 0:
        raise InvalidDurationError(f"Duration must be positive: {text!r}")

    return timedelta(seconds=value * _UNIT_SECONDS[match.group(2)])
