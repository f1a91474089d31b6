"""로드된 스킬을 이름으로 관리하는 스킬 레지스트리.

레지스트리 지원 기능:
- 이름 기반 조회와 유일성 보장
- 트리거 키워드 기반 매칭
- 매칭된 스킬 본문의 컨텍스트 렌더링

Example:
    registry = SkillRegistry.from_directory(BUNDLED_SKILLS_DIR)

    # 특정 스킬 가져오기
    schema = registry.get("clickhouse-schema-design")

    # 입력과 관련된 스킬 고르기
    skills = registry.match("why is my JOIN slow")
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from clickhouse_skills.config import DEFAULT_MAX_CONTEXT_CHARS
from clickhouse_skills.skills.context import render_skill_context
from clickhouse_skills.skills.errors import DuplicateSkillError, SkillParseError
from clickhouse_skills.skills.load import LoadResult, Skill, load_all
from clickhouse_skills.skills.matcher import SkillMatch, match, rank

logger = logging.getLogger(__name__)


class SkillRegistry:
    """스킬 관리를 위한 레지스트리.

    Example:
        registry = SkillRegistry()
        registry.register(skill)

        # 이름으로 조회
        skill = registry.get("clickhouse-materialized-views")

        # 입력 텍스트로 매칭
        registry.match("CREATE MATERIALIZED VIEW daily_mv")
    """

    def __init__(self, skills: Iterable[Skill] = ()) -> None:
        """레지스트리를 초기화한다.

        Args:
            skills: 처음에 등록할 스킬.

        Raises:
            DuplicateSkillError: 같은 이름의 스킬이 두 번 주어진 경우.
        """
        self._skills: dict[str, Skill] = {}
        self.load_errors: tuple[SkillParseError, ...] = ()
        for skill in skills:
            self.register(skill)

    @classmethod
    def from_directory(cls, skills_dir: str | Path, source: str = "project") -> SkillRegistry:
        """디렉토리의 스킬 문서를 로드해 레지스트리를 만든다.

        파싱에 실패한 문서는 경고로 기록되고 load_errors에 보관된다.

        Raises:
            SkillNotFoundError: 스킬 문서가 하나도 없을 때.
            DuplicateSkillError: 같은 이름의 문서가 둘 이상일 때.
        """
        result: LoadResult = load_all(skills_dir, source=source)
        registry = cls(result.skills)
        registry.load_errors = result.errors
        logger.info(
            "%s에서 스킬 %d개 로드 (실패 %d개)",
            skills_dir,
            len(result.skills),
            len(result.errors),
        )
        return registry

    def register(self, skill: Skill) -> None:
        """스킬을 등록한다.

        Raises:
            DuplicateSkillError: 같은 이름의 스킬이 이미 등록된 경우.
        """
        existing = self._skills.get(skill.name)
        if existing is not None:
            raise DuplicateSkillError(skill.name, existing.path, skill.path)
        self._skills[skill.name] = skill

    def unregister(self, name: str) -> None:
        """레지스트리에서 스킬을 제거한다.

        Raises:
            KeyError: 스킬을 찾을 수 없는 경우.
        """
        if name not in self._skills:
            msg = f"스킬 '{name}'을(를) 레지스트리에서 찾을 수 없습니다"
            raise KeyError(msg)
        del self._skills[name]

    def get(self, name: str) -> Skill | None:
        """이름으로 스킬을 가져온다. 없으면 None."""
        return self._skills.get(name)

    def list_all(self) -> list[Skill]:
        """등록된 모든 스킬을 이름 순으로 나열한다."""
        return [self._skills[name] for name in self.list_names()]

    def list_names(self) -> list[str]:
        """등록된 모든 스킬 이름을 정렬해 나열한다."""
        return sorted(self._skills)

    def get_descriptions(self) -> dict[str, str]:
        """스킬 이름과 설명의 매핑을 가져온다.

        시스템 프롬프트에 사용 가능한 스킬을 표시할 때 유용하다.
        """
        return {skill.name: skill.description for skill in self.list_all()}

    def rank(self, text: str, limit: int | None = None) -> list[SkillMatch]:
        """입력 텍스트에 대한 매칭 결과를 키워드와 함께 반환한다."""
        return rank(text, self._skills.values(), limit=limit)

    def match(self, text: str, limit: int | None = None) -> list[Skill]:
        """입력 텍스트에 트리거 키워드가 나타나는 스킬을 순위대로 반환한다."""
        return match(text, self._skills.values(), limit=limit)

    def render_context(
        self,
        text: str,
        max_skills: int | None = None,
        max_chars: int = DEFAULT_MAX_CONTEXT_CHARS,
    ) -> str:
        """입력에 매칭된 스킬 본문을 컨텍스트 텍스트로 렌더링한다."""
        return render_skill_context(self.match(text, limit=max_skills), max_chars=max_chars)

    def __contains__(self, name: object) -> bool:
        return name in self._skills

    def __len__(self) -> int:
        """등록된 스킬 수를 반환한다."""
        return len(self._skills)
