"""clickhouse_skills 설정.

환경 변수 (.env 파일도 지원):
- CLICKHOUSE_SKILLS_DIR: 기본 스킬 디렉토리 (기본값: 번들된 clickhouse_skills/skills_data/)
- CLICKHOUSE_SKILLS_PROJECT_DIR: 프로젝트 스킬 디렉토리 (같은 이름을 오버라이드)
- CLICKHOUSE_SKILLS_MAX_CONTEXT_CHARS: 컨텍스트에 넣을 스킬 본문 최대 글자 수
- CLICKHOUSE_SKILLS_MAX_MATCHES: 한 번에 주입할 최대 스킬 수
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

PACKAGE_DIR = Path(__file__).resolve().parent

# 패키지 데이터로 함께 설치되는 ClickHouse 스킬 문서
BUNDLED_SKILLS_DIR = PACKAGE_DIR / "skills_data"

ENV_PREFIX = "CLICKHOUSE_SKILLS_"

DEFAULT_MAX_CONTEXT_CHARS = 12000
DEFAULT_MAX_SKILLS = 3


def _positive_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as e:
        msg = f"{name}은(는) 정수여야 합니다: {raw!r}"
        raise ValueError(msg) from e
    if value <= 0:
        msg = f"{name}은(는) 양수여야 합니다: {value}"
        raise ValueError(msg)
    return value


def _optional_path(name: str) -> Path | None:
    raw = os.environ.get(name)
    return Path(raw).expanduser() if raw else None


@dataclass
class SkillsConfig:
    """스킬 로딩과 컨텍스트 주입 설정."""

    skills_dir: Path = BUNDLED_SKILLS_DIR
    """기본(사용자 레벨) 스킬 디렉토리."""

    project_skills_dir: Path | None = None
    """프로젝트 레벨 스킬 디렉토리. 같은 이름의 스킬을 오버라이드."""

    max_context_chars: int = DEFAULT_MAX_CONTEXT_CHARS
    """시스템 프롬프트에 넣을 스킬 본문 최대 글자 수."""

    max_matched_skills: int = DEFAULT_MAX_SKILLS
    """한 번의 모델 호출에 주입할 최대 스킬 수."""

    @classmethod
    def from_env(cls) -> SkillsConfig:
        """환경 변수(.env 포함)에서 설정을 읽는다.

        Raises:
            ValueError: 숫자 설정이 양의 정수가 아닐 때.
        """
        # 라이브러리 설치 위치가 아닌 작업 디렉토리 기준으로 .env 탐색
        load_dotenv(find_dotenv(usecwd=True))

        return cls(
            skills_dir=_optional_path(f"{ENV_PREFIX}DIR") or BUNDLED_SKILLS_DIR,
            project_skills_dir=_optional_path(f"{ENV_PREFIX}PROJECT_DIR"),
            max_context_chars=_positive_int(
                f"{ENV_PREFIX}MAX_CONTEXT_CHARS", DEFAULT_MAX_CONTEXT_CHARS
            ),
            max_matched_skills=_positive_int(f"{ENV_PREFIX}MAX_MATCHES", DEFAULT_MAX_SKILLS),
        )
