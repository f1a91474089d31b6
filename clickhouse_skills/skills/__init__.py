"""ClickHouse 스킬 모듈.

스킬 문서를 로드하고, 입력 텍스트와 트리거 키워드를 매칭해,
매칭된 스킬 본문을 어시스턴트 컨텍스트로 넘기는 흐름을 구현한다:
1. load_all: 디렉토리의 마크다운 문서에서 YAML 프론트매터 파싱
2. match: 입력에 트리거 키워드가 나타나는 스킬을 순위대로 선택
3. render_skill_context: 선택된 스킬 본문을 컨텍스트 텍스트로 렌더링

공개 API:
- Skill, LoadResult, load_all, parse_skill_file, list_skills
- SkillMatch, match, rank
- SkillRegistry
- SkillsMiddleware: 에이전트 실행에 스킬을 통합하는 미들웨어
- SkillError, SkillParseError, SkillNotFoundError, DuplicateSkillError
"""

from clickhouse_skills.skills.context import render_skill_context, select_skill_context
from clickhouse_skills.skills.errors import (
    DuplicateSkillError,
    SkillError,
    SkillNotFoundError,
    SkillParseError,
)
from clickhouse_skills.skills.load import (
    LoadResult,
    Skill,
    list_skills,
    load_all,
    parse_skill_file,
)
from clickhouse_skills.skills.matcher import SkillMatch, match, rank
from clickhouse_skills.skills.middleware import SkillsMiddleware, SkillsState
from clickhouse_skills.skills.registry import SkillRegistry
from clickhouse_skills.skills.triggers import extract_trigger_keywords

__all__ = [
    "Skill",
    "LoadResult",
    "load_all",
    "parse_skill_file",
    "list_skills",
    "extract_trigger_keywords",
    "SkillMatch",
    "match",
    "rank",
    "render_skill_context",
    "select_skill_context",
    "SkillRegistry",
    "SkillsMiddleware",
    "SkillsState",
    "SkillError",
    "SkillParseError",
    "SkillNotFoundError",
    "DuplicateSkillError",
]
