"""스킬 프론트매터와 설명에서 트리거 키워드를 추출한다.

트리거 키워드는 다음 위치에서 수집된다:
- 프론트매터의 `triggers` / `keywords` (리스트 또는 쉼표 구분 문자열)
- `metadata`의 `search-terms` / `triggers` (쉼표 구분 문자열)
- 설명 안의 큰따옴표 또는 백틱으로 감싼 구문
- 설명 안의 `Triggers:` / `Keywords:` / `Search terms:` / `Triggers on` 뒤 목록

Example:
    ```yaml
    ---
    name: clickhouse-query-optimization
    description: >
      Diagnose slow ClickHouse queries. Triggers on: slow query, JOIN,
      PREWHERE, "query performance".
    triggers: [EXPLAIN, system.query_log]
    ---
    ```
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from typing import Any

# 3자 미만 키워드는 일반 텍스트의 부분 문자열로 너무 쉽게 매칭됨
MIN_KEYWORD_LENGTH = 3

FRONTMATTER_TRIGGER_KEYS = ("triggers", "keywords")
METADATA_TRIGGER_KEYS = ("search-terms", "search_terms", "triggers")

_QUOTED_PATTERN = re.compile(r'"([^"\n]+)"|`([^`\n]+)`')
# 목록은 마침표+공백, 빈 줄, 또는 문자열 끝에서 끝남 (system.query_log 같은 점은 유지)
_MARKER_PATTERN = re.compile(
    r"\b(?:triggers?\s+on\s*:?|(?:triggers?|keywords|search[\s-]terms)\s*:)"
    r"\s*(.+?)(?=\.(?:\s|\Z)|\n\s*\n|\Z)",
    re.IGNORECASE | re.DOTALL,
)
_SPLIT_PATTERN = re.compile(r",|;|\bor\b|\band\b", re.IGNORECASE)
_WHITESPACE = re.compile(r"\s+")
_EDGE_PUNCTUATION = "\"'`.,;:!?()[]{}<>"


def normalize_text(text: str) -> str:
    """매칭용으로 텍스트를 정규화한다 (casefold + 공백 압축)."""
    return _WHITESPACE.sub(" ", text.casefold()).strip()


def normalize_keyword(keyword: str) -> str | None:
    """키워드 하나를 정규화한다.

    Returns:
        정규화된 키워드. 너무 짧거나 비어 있으면 None.
    """
    value = normalize_text(str(keyword)).strip(_EDGE_PUNCTUATION).strip()
    if len(value) < MIN_KEYWORD_LENGTH:
        return None
    return value


def _split_terms(value: Any) -> list[str]:
    """리스트 또는 쉼표 구분 문자열을 개별 용어로 나눈다."""
    if value is None:
        return []
    if isinstance(value, str):
        return value.split(",")
    if isinstance(value, Iterable):
        return [str(item) for item in value if item is not None]
    return [str(value)]


def _terms_from_description(description: str) -> list[str]:
    terms: list[str] = []

    for quoted in _QUOTED_PATTERN.finditer(description):
        terms.append(quoted.group(1) or quoted.group(2))

    for marker in _MARKER_PATTERN.finditer(description):
        listing = _QUOTED_PATTERN.sub(lambda m: m.group(1) or m.group(2), marker.group(1))
        terms.extend(_SPLIT_PATTERN.split(listing))

    return terms


def extract_trigger_keywords(
    front_matter: Mapping[str, Any], description: str
) -> tuple[str, ...]:
    """프론트매터와 설명에서 트리거 키워드를 추출한다.

    Args:
        front_matter: 파싱된 YAML 프론트매터
        description: 스킬 설명

    Returns:
        정렬되고 중복 제거된 소문자 키워드 튜플
    """
    raw_terms: list[str] = []

    for key in FRONTMATTER_TRIGGER_KEYS:
        raw_terms.extend(_split_terms(front_matter.get(key)))

    metadata = front_matter.get("metadata")
    if isinstance(metadata, Mapping):
        for key in METADATA_TRIGGER_KEYS:
            raw_terms.extend(_split_terms(metadata.get(key)))

    raw_terms.extend(_terms_from_description(description))

    keywords = {
        normalized
        for term in raw_terms
        if (normalized := normalize_keyword(term)) is not None
    }
    return tuple(sorted(keywords))
