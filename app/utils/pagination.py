"""커서 페이지네이션 유틸리티 모듈.

Cursor (keyset) pagination utility module.
Cursors are URL-safe base64 of a small JSON object identifying the last
row of a page by its ``(created_at, id)`` sort key. They are opaque to clients.
"""

import base64
import binascii
import json
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from app.utils.exceptions import BadRequestError


class PageInfo(BaseModel):
    """커서 페이지 정보 모델.

    Cursor page metadata returned alongside a list of items.

    Attributes:
        has_next_page: 다음 페이지 존재 여부 (Whether more items follow)
        next_cursor: 다음 페이지 커서 (Cursor for the next page, None on the last page)
    """

    has_next_page: bool
    next_cursor: str | None = None


@dataclass(frozen=True)
class Cursor:
    """디코딩된 커서 — 마지막 행의 정렬 키 (Decoded sort key of the last row)."""

    created_at: datetime
    id: UUID


def encode_cursor(created_at: datetime, record_id: UUID) -> str:
    """정렬 키를 불투명 커서 문자열로 인코딩합니다.

    Encode a ``(created_at, id)`` sort key as an opaque cursor string.

    Args:
        created_at: 마지막 행의 생성 일시 (Creation timestamp of the last row)
        record_id: 마지막 행의 ID (Id of the last row)

    Returns:
        str: URL-safe base64 커서 (URL-safe base64 cursor)
    """
    raw: str = json.dumps({"created_at": created_at.isoformat(), "id": str(record_id)})
    return base64.urlsafe_b64encode(raw.encode("utf-8")).decode("ascii")


def decode_cursor(cursor: str) -> Cursor:
    """커서 문자열을 정렬 키로 디코딩합니다.

    Decode an opaque cursor produced by :func:`encode_cursor`.

    Raises:
        BadRequestError: 커서 형식이 잘못됨 (Malformed cursor)
    """
    try:
        payload = json.loads(base64.urlsafe_b64decode(cursor.encode("ascii")))
        return Cursor(
            created_at=datetime.fromisoformat(payload["created_at"]),
            id=UUID(payload["id"]),
        )
    except (binascii.Error, UnicodeError, ValueError, KeyError, TypeError) as exc:
        raise BadRequestError("Invalid cursor") from exc
