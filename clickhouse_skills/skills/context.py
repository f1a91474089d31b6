"""매칭된 스킬 본문을 어시스턴트 컨텍스트용 텍스트로 렌더링한다."""

from __future__ import annotations

from collections.abc import Iterable

from clickhouse_skills.config import DEFAULT_MAX_CONTEXT_CHARS, DEFAULT_MAX_SKILLS
from clickhouse_skills.skills.load import Skill
from clickhouse_skills.skills.matcher import match


TRUNCATION_MARKER = "\n\n[...truncated...]"

# 남은 예산이 이보다 작으면 다음 블록을 시작하지 않음
_MIN_BLOCK_CHARS = 200


def format_skill_block(skill: Skill) -> str:
    """스킬 하나를 헤더, 설명, 본문 블록으로 포맷팅한다."""
    return f"## Skill: {skill.name}\n\n> {skill.description}\n\n{skill.body}".strip()


def render_skill_context(
    skills: Iterable[Skill], max_chars: int = DEFAULT_MAX_CONTEXT_CHARS
) -> str:
    """스킬 본문을 주어진 순서대로 이어 붙인다.

    예산(max_chars)을 넘으면 마지막 블록을 잘라 TRUNCATION_MARKER를 붙이고 멈춘다.

    Args:
        skills: 렌더링할 스킬 (보통 match 결과 순서)
        max_chars: 출력 최대 글자 수

    Returns:
        컨텍스트 텍스트. 스킬이 없으면 빈 문자열.
    """
    remaining = max_chars
    blocks: list[str] = []

    for skill in skills:
        block = format_skill_block(skill)
        if len(block) > remaining:
            cut = remaining - len(TRUNCATION_MARKER)
            if cut > 0:
                blocks.append(block[:cut].rstrip() + TRUNCATION_MARKER)
            break
        blocks.append(block)
        remaining -= len(block) + 2
        if remaining <= _MIN_BLOCK_CHARS:
            break

    return "\n\n".join(blocks)


def select_skill_context(
    text: str,
    skills: Iterable[Skill],
    max_skills: int = DEFAULT_MAX_SKILLS,
    max_chars: int = DEFAULT_MAX_CONTEXT_CHARS,
) -> str:
    """입력에 매칭된 상위 스킬의 본문을 렌더링한다."""
    return render_skill_context(match(text, skills, limit=max_skills), max_chars=max_chars)
