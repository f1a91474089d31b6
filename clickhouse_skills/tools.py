"""스킬 검색/읽기 도구 모듈.

에이전트가 시스템 프롬프트에 자동 주입되지 않은 스킬도 필요할 때 찾아 읽을 수 있도록
두 가지 도구를 제공한다:
- `find_skills`: 질의와 매칭되는 스킬 이름, 설명, 매칭 키워드
- `read_skill`: 스킬 하나의 전체 본문
"""

from langchain_core.tools import BaseTool, StructuredTool

from clickhouse_skills.skills.context import format_skill_block
from clickhouse_skills.skills.registry import SkillRegistry


def create_skill_tools(registry: SkillRegistry) -> list[BaseTool]:
    """레지스트리에 바인딩된 스킬 도구들을 생성한다."""
    return [
        _create_find_skills_tool(registry),
        _create_read_skill_tool(registry),
    ]


def _create_find_skills_tool(registry: SkillRegistry) -> BaseTool:
    def find_skills(query: str, limit: int = 5) -> str:
        """질의와 관련된 ClickHouse 스킬을 찾습니다.

        Args:
            query: 작업 설명이나 SQL 조각.
            limit: 반환할 최대 스킬 수.

        Returns:
            매칭된 스킬 목록.
        """
        matches = registry.rank(query, limit=limit)
        if not matches:
            names = ", ".join(registry.list_names()) or "(none)"
            return f"No skills matched '{query}'. Available skills: {names}"

        lines = []
        for m in matches:
            lines.append(f"- **{m.skill.name}**: {m.skill.description}")
            lines.append(f"  matched: {', '.join(m.matched_keywords)}")
        return "\n".join(lines)

    return StructuredTool.from_function(
        name="find_skills",
        description="""ClickHouse 스킬을 검색합니다.

사용법:
- query: 사용자 요청, 테이블 정의, 느린 쿼리 등 자유 텍스트
- limit: 최대 결과 수 (기본 5)

트리거 키워드가 많이 매칭된 스킬부터 반환합니다.""",
        func=find_skills,
    )


def _create_read_skill_tool(registry: SkillRegistry) -> BaseTool:
    def read_skill(name: str) -> str:
        """스킬의 전체 본문을 읽습니다.

        Args:
            name: 스킬 이름 (예: clickhouse-schema-design).

        Returns:
            스킬 본문 또는 오류 메시지.
        """
        skill = registry.get(name.strip())
        if skill is None:
            names = ", ".join(registry.list_names()) or "(none)"
            return f"Error: skill '{name}' not found. Available skills: {names}"
        return format_skill_block(skill)

    return StructuredTool.from_function(
        name="read_skill",
        description="""스킬 하나의 전체 가이드를 읽습니다.

사용법:
- name: find_skills 또는 시스템 프롬프트의 스킬 목록에 표시된 이름""",
        func=read_skill,
    )
