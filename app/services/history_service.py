"""지역 역사 요약 조회 서비스 (Wikipedia)."""

from __future__ import annotations

import asyncio
import re
from functools import lru_cache

import wikipediaapi

from app.core.config import get_settings
from app.core.logger import get_logger
from app.schemas.place import HistoryResponse

logger = get_logger(__name__)

US_STATE_NAMES: dict[str, str] = {
    "AL": "Alabama", "AK": "Alaska", "AZ": "Arizona", "AR": "Arkansas", "CA": "California",
    "CO": "Colorado", "CT": "Connecticut", "DE": "Delaware", "FL": "Florida", "GA": "Georgia",
    "HI": "Hawaii", "ID": "Idaho", "IL": "Illinois", "IN": "Indiana", "IA": "Iowa",
    "KS": "Kansas", "KY": "Kentucky", "LA": "Louisiana", "ME": "Maine", "MD": "Maryland",
    "MA": "Massachusetts", "MI": "Michigan", "MN": "Minnesota", "MS": "Mississippi", "MO": "Missouri",
    "MT": "Montana", "NE": "Nebraska", "NV": "Nevada", "NH": "New Hampshire", "NJ": "New Jersey",
    "NM": "New Mexico", "NY": "New York", "NC": "North Carolina", "ND": "North Dakota", "OH": "Ohio",
    "OK": "Oklahoma", "OR": "Oregon", "PA": "Pennsylvania", "RI": "Rhode Island", "SC": "South Carolina",
    "SD": "South Dakota", "TN": "Tennessee", "TX": "Texas", "UT": "Utah", "VT": "Vermont",
    "VA": "Virginia", "WA": "Washington", "WV": "West Virginia", "WI": "Wisconsin", "WY": "Wyoming",
}  # fmt: skip

_USA_SUFFIX = re.compile(r",\s*USA$")
_STATE_SUFFIX = re.compile(r",\s*([A-Z]{2})$")


def sanitize_for_wikipedia(location: str) -> str:
    """`Austin, TX, USA` → `Austin, Texas`처럼 문서 제목으로 찾기 좋은 형태로 바꿉니다."""
    cleaned = _USA_SUFFIX.sub("", location.strip())
    match = _STATE_SUFFIX.search(cleaned)
    if match and match.group(1) in US_STATE_NAMES:
        cleaned = _STATE_SUFFIX.sub(f", {US_STATE_NAMES[match.group(1)]}", cleaned)
    return cleaned


def _truncate(text: str, max_chars: int) -> str:
    if max_chars <= 0 or len(text) <= max_chars:
        return text
    cut = text[:max_chars]
    sentence_end = cut.rfind(". ")
    if sentence_end > max_chars // 2:
        return cut[: sentence_end + 1]
    return cut.rstrip() + "…"


class HistoryService:
    """Wikipedia 문서 요약으로 지역 역사를 조회합니다."""

    def __init__(self, wiki: wikipediaapi.Wikipedia, max_chars: int = 2000) -> None:
        self._wiki = wiki
        self._max_chars = max_chars

    @classmethod
    def from_settings(cls) -> HistoryService:
        settings = get_settings()
        wiki = wikipediaapi.Wikipedia(
            user_agent=settings.WIKIPEDIA_USER_AGENT,
            language=settings.WIKIPEDIA_LANGUAGE,
            extract_format=wikipediaapi.ExtractFormat.WIKI,
        )
        return cls(wiki, settings.HISTORY_MAX_CHARS)

    async def lookup(self, location: str) -> HistoryResponse | None:
        """지역 요약을 반환합니다. 문서가 없거나 조회에 실패하면 None입니다."""
        title = sanitize_for_wikipedia(location)
        if not title:
            return None

        def _fetch() -> HistoryResponse | None:
            page = self._wiki.page(title)
            if not page.exists():
                return None
            return HistoryResponse(title=page.title, extract=_truncate(page.summary or "", self._max_chars))

        try:
            result = await asyncio.to_thread(_fetch)
        except Exception as exc:
            logger.error("Wikipedia lookup failed: title=%s error=%s", title, exc)
            return None

        if result is None:
            logger.info("Wikipedia article not found: title=%s", title)
        return result


@lru_cache(maxsize=1)
def get_history_service() -> HistoryService:
    """프로세스 단위 싱글톤을 반환합니다."""
    return HistoryService.from_settings()
