"""ClickHouse 베스트 프랙티스 스킬 선택기.

ClickHouse 지식(스키마 설계, 쿼리 최적화, materialized view)을 담은 마크다운
스킬 문서를 로드하고, 사용자 작업 설명에 관련된 스킬을 골라 AI 어시스턴트의
컨텍스트 윈도우에 넣어준다.

## 모듈 구조

```
clickhouse_skills/
├── __init__.py          # 이 파일
├── config.py            # SkillsConfig (환경 변수 / .env)
├── prompts.py           # 시스템 프롬프트 템플릿
├── tools.py             # find_skills / read_skill 도구
├── skills_data/         # 번들된 SKILL.md 문서 (패키지 데이터)
└── skills/
    ├── errors.py        # 예외 계층
    ├── triggers.py      # 트리거 키워드 추출
    ├── load.py          # 스킬 스토어 (load_all)
    ├── matcher.py       # 트리거 매처 (match)
    ├── context.py       # 컨텍스트 렌더링
    ├── registry.py      # SkillRegistry
    └── middleware.py    # SkillsMiddleware
```

## 사용 예시

```python
from clickhouse_skills import BUNDLED_SKILLS_DIR, SkillRegistry

registry = SkillRegistry.from_directory(BUNDLED_SKILLS_DIR)
registry.match("why is my JOIN slow")
# [Skill(name='clickhouse-query-optimization', ...)]
```
"""

__version__ = "0.1.0"

from clickhouse_skills.config import BUNDLED_SKILLS_DIR, SkillsConfig
from clickhouse_skills.skills import (
    DuplicateSkillError,
    LoadResult,
    Skill,
    SkillError,
    SkillNotFoundError,
    SkillParseError,
    SkillRegistry,
    SkillsMiddleware,
    load_all,
    match,
    render_skill_context,
)
from clickhouse_skills.tools import create_skill_tools

__all__ = [
    "BUNDLED_SKILLS_DIR",
    "SkillsConfig",
    "Skill",
    "LoadResult",
    "load_all",
    "match",
    "render_skill_context",
    "SkillRegistry",
    "SkillsMiddleware",
    "create_skill_tools",
    "SkillError",
    "SkillParseError",
    "SkillNotFoundError",
    "DuplicateSkillError",
]
