"""ClickHouse 스킬을 시스템 프롬프트에 주입하기 위한 미들웨어.

이 미들웨어는 다음 순서로 동작한다:
1. 세션 시작 시 스킬 디렉토리에서 문서를 다시 로드하고 요약을 skills_metadata 상태에 기록
2. 모델 호출마다 상태에 기록된 스킬 중에서 가장 최근 사용자 메시지와 트리거 키워드를 매칭
3. 전체 스킬 목록(이름 + 설명)과 매칭된 스킬 본문을 시스템 프롬프트에 추가

스킬 디렉토리 구조:
{SKILLS_DIR}/
├── clickhouse-schema-design/
│   └── SKILL.md
├── clickhouse-query-optimization/
│   └── SKILL.md
└── clickhouse-materialized-views/
    └── SKILL.md
"""

import logging
from collections.abc import Awaitable, Callable, Mapping, Sequence
from typing import Any, NotRequired, TypedDict

from langchain.agents.middleware.types import (
    AgentMiddleware,
    AgentState,
    ModelRequest,
    ModelResponse,
)
from langchain_core.messages import BaseMessage, HumanMessage
from langgraph.runtime import Runtime

from clickhouse_skills.config import SkillsConfig
from clickhouse_skills.prompts import (
    MATCHED_SKILLS_SECTION,
    NO_SKILLS_MESSAGE,
    SKILLS_SYSTEM_PROMPT,
)
from clickhouse_skills.skills.context import render_skill_context
from clickhouse_skills.skills.load import Skill, list_skills
from clickhouse_skills.skills.matcher import match
from clickhouse_skills.skills.registry import SkillRegistry

logger = logging.getLogger(__name__)


class SkillSummary(TypedDict):
    """에이전트 상태에 저장하는 스킬 요약."""

    name: str
    description: str
    path: str
    source: str


class SkillsState(AgentState):
    """스킬 미들웨어용 상태."""

    skills_metadata: NotRequired[list[SkillSummary]]
    """로드된 스킬 요약 목록 (이름, 설명, 경로, 출처)."""


class SkillsStateUpdate(TypedDict):
    """스킬 미들웨어용 상태 업데이트."""

    skills_metadata: list[SkillSummary]


def _summarize(skill: Skill) -> SkillSummary:
    return SkillSummary(
        name=skill.name,
        description=skill.description,
        path=skill.path,
        source=skill.source,
    )


def _message_text(message: BaseMessage) -> str:
    content = message.content
    if isinstance(content, str):
        return content
    parts = []
    for block in content:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(str(block.get("text", "")))
    return "\n".join(parts)


def latest_user_text(messages: Sequence[Any]) -> str:
    """메시지 목록에서 가장 최근 사용자 메시지의 텍스트를 반환한다."""
    for message in reversed(messages or []):
        if isinstance(message, HumanMessage):
            return _message_text(message)
    return ""


class SkillsMiddleware(AgentMiddleware):
    """ClickHouse 스킬을 로드하고 매칭해 시스템 프롬프트에 주입하는 미들웨어.

    사용자 레벨과 프로젝트 레벨 스킬 모두 지원:
    - 기본 스킬: config.skills_dir (기본값은 번들된 skills_data/)
    - 프로젝트 스킬: config.project_skills_dir, 같은 이름의 기본 스킬을 오버라이드

    Args:
        config: 스킬 설정. None이면 SkillsConfig() 기본값 사용.
    """

    state_schema = SkillsState

    def __init__(self, config: SkillsConfig | None = None) -> None:
        self.config = config or SkillsConfig()
        self.system_prompt_template = SKILLS_SYSTEM_PROMPT
        self._registry: SkillRegistry | None = None

    @property
    def registry(self) -> SkillRegistry:
        """현재 스킬 레지스트리. 아직 로드되지 않았으면 로드한다."""
        if self._registry is None:
            self._registry = self.reload()
        return self._registry

    def reload(self) -> SkillRegistry:
        """스킬 디렉토리에서 스킬을 다시 로드한다."""
        skills = list_skills(
            user_skills_dir=self.config.skills_dir,
            project_skills_dir=self.config.project_skills_dir,
        )
        self._registry = SkillRegistry(skills)
        return self._registry

    def _format_skills_list(self, skills: list[Skill]) -> str:
        """시스템 프롬프트 표시용 스킬 목록을 포맷팅한다."""
        if not skills:
            locations = [f"{self.config.skills_dir}/"]
            if self.config.project_skills_dir:
                locations.append(f"{self.config.project_skills_dir}/")
            return NO_SKILLS_MESSAGE.format(locations=" or ".join(locations))

        return "\n".join(f"- **{skill.name}**: {skill.description}" for skill in skills)

    def skills_for_state(self, state: Any) -> list[Skill]:
        """실행 상태에 기록된 스킬만 골라 반환한다.

        before_agent가 상태에 남긴 skills_metadata의 이름으로 레지스트리를
        걸러서, 같은 미들웨어를 쓰는 다른 실행이 다시 로드해도 이번 실행이
        시작할 때 본 스킬 집합을 유지한다. 상태에 기록이 없으면 레지스트리의
        모든 스킬을 반환한다.
        """
        skills = self.registry.list_all()
        summaries = state.get("skills_metadata") if isinstance(state, Mapping) else None
        if not isinstance(summaries, list):
            return skills

        names = {summary["name"] for summary in summaries}
        return [skill for skill in skills if skill.name in names]

    def build_skills_section(self, text: str, skills: list[Skill] | None = None) -> str:
        """입력 텍스트에 대한 스킬 시스템 프롬프트 섹션을 만든다.

        Args:
            text: 매칭할 사용자 텍스트
            skills: 대상 스킬. None이면 레지스트리의 모든 스킬.
        """
        if skills is None:
            skills = self.registry.list_all()
        matched = match(text, skills, limit=self.config.max_matched_skills)
        if matched:
            logger.debug("주입할 스킬: %s", ", ".join(s.name for s in matched))

        skills_context = render_skill_context(
            matched, max_chars=self.config.max_context_chars
        )
        matched_section = (
            MATCHED_SKILLS_SECTION.format(skills_context=skills_context)
            if skills_context
            else ""
        )
        return self.system_prompt_template.format(
            skills_list=self._format_skills_list(skills),
            matched_section=matched_section,
        )

    def _apply(self, request: ModelRequest) -> ModelRequest:
        skills_section = self.build_skills_section(
            latest_user_text(request.messages),
            self.skills_for_state(request.state),
        )

        if request.system_prompt:
            system_prompt = request.system_prompt + "\n\n" + skills_section
        else:
            system_prompt = skills_section

        return request.override(system_prompt=system_prompt)

    def before_agent(
        self, state: SkillsState, runtime: Runtime
    ) -> SkillsStateUpdate | None:
        """에이전트 실행 전에 스킬을 다시 로드한다.

        세션 사이의 스킬 문서 변경을 반영하기 위해 매 실행마다 다시 로드한다.
        """
        registry = self.reload()
        return SkillsStateUpdate(
            skills_metadata=[_summarize(skill) for skill in registry.list_all()]
        )

    def wrap_model_call(
        self,
        request: ModelRequest,
        handler: Callable[[ModelRequest], ModelResponse],
    ) -> ModelResponse:
        """시스템 프롬프트에 스킬 목록과 매칭된 스킬 본문을 주입한다."""
        return handler(self._apply(request))

    async def awrap_model_call(
        self,
        request: ModelRequest,
        handler: Callable[[ModelRequest], Awaitable[ModelResponse]],
    ) -> ModelResponse:
        """(비동기) 시스템 프롬프트에 스킬 목록과 매칭된 스킬 본문을 주입한다."""
        return await handler(self._apply(request))
