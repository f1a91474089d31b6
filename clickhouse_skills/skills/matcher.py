"""자유 텍스트 입력에 관련된 스킬을 고르는 트리거 매처.

매칭 규칙:
- 입력을 casefold하고 공백을 압축한 뒤 각 트리거 키워드의 부분 문자열 포함 여부를 본다.
- 매칭된 키워드 수 내림차순, 같으면 스킬 이름 오름차순으로 정렬한다.
- 매칭이 없으면 빈 리스트를 반환한다 (오류 아님).
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from clickhouse_skills.skills.load import Skill
from clickhouse_skills.skills.triggers import normalize_text

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SkillMatch:
    """매칭된 스킬과 입력에서 발견된 키워드."""

    skill: Skill
    matched_keywords: tuple[str, ...]

    @property
    def score(self) -> int:
        return len(self.matched_keywords)


def rank(text: str, skills: Iterable[Skill], limit: int | None = None) -> list[SkillMatch]:
    """입력 텍스트에 대한 스킬 매칭 결과를 순위대로 반환한다.

    Args:
        text: 사용자 작업 설명 등 자유 텍스트
        skills: 후보 스킬
        limit: 반환할 최대 개수 (None이면 전부)

    Returns:
        키워드 수 내림차순, 이름 오름차순으로 정렬된 SkillMatch 목록
    """
    needle = normalize_text(text or "")
    if not needle:
        return []

    matches = []
    for skill in skills:
        hits = tuple(keyword for keyword in skill.trigger_keywords if keyword in needle)
        if hits:
            matches.append(SkillMatch(skill=skill, matched_keywords=hits))

    matches.sort(key=lambda m: (-m.score, m.skill.name))
    if limit is not None:
        matches = matches[: max(limit, 0)]

    logger.debug(
        "스킬 매칭 %d건: %s",
        len(matches),
        ", ".join(f"{m.skill.name}({m.score})" for m in matches),
    )
    return matches


def match(text: str, skills: Iterable[Skill], limit: int | None = None) -> list[Skill]:
    """트리거 키워드가 입력에 나타나는 스킬을 순위대로 반환한다."""
    return [m.skill for m in rank(text, skills, limit=limit)]
