"""마크다운 스킬 문서를 파싱하고 로드하는 스킬 로더.

각 스킬은 YAML 프론트매터(name, description 필수)와 마크다운 본문으로 이루어진
문서 하나이다. 스킬 디렉토리는 두 가지 배치를 모두 지원한다:

```
skills/
├── clickhouse-schema-design/
│   └── SKILL.md            # 디렉토리형 스킬
└── clickhouse-ttl.md       # 단일 파일형 스킬
```

SKILL.md 구조 예시:
```markdown
---
name: clickhouse-schema-design
description: ClickHouse 테이블 설계 가이드. Triggers on: CREATE TABLE, ORDER BY.
triggers: [MergeTree, LowCardinality]
---

# ClickHouse 스키마 설계
...
```

스킬은 로드된 뒤 변경되지 않으며, 이름은 한 디렉토리 안에서 유일해야 한다.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml

from clickhouse_skills.skills.errors import (
    DuplicateSkillError,
    SkillNotFoundError,
    SkillParseError,
)
from clickhouse_skills.skills.triggers import extract_trigger_keywords

logger = logging.getLogger(__name__)

# 스킬 문서 최대 크기 (10MB) - DoS 방지
MAX_SKILL_FILE_SIZE = 10 * 1024 * 1024

# Agent Skills 명세 제약 조건 (https://agentskills.io/specification)
MAX_SKILL_NAME_LENGTH = 64
MAX_SKILL_DESCRIPTION_LENGTH = 1024

SKILL_FILE_NAME = "SKILL.md"

_FRONTMATTER_PATTERN = re.compile(r"\A---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|\Z)", re.DOTALL)
_NAME_PATTERN = re.compile(r"^[a-z0-9]+(-[a-z0-9]+)*$")

_EMPTY_METADATA: Mapping[str, str] = MappingProxyType({})


@dataclass(frozen=True)
class Skill:
    """로드된 스킬 문서 하나."""

    name: str
    """스킬 이름 (디렉토리/스토어 안에서 유일)."""

    description: str
    """프론트매터의 설명 (최대 1024자)."""

    body: str
    """프론트매터 뒤의 마크다운 본문."""

    trigger_keywords: tuple[str, ...] = ()
    """매칭에 사용하는 소문자 트리거 키워드."""

    path: str = ""
    """스킬 문서 경로."""

    source: str = "project"
    """스킬 출처 ('user' 또는 'project')."""

    license: str | None = None
    compatibility: str | None = None
    allowed_tools: str | None = None
    metadata: Mapping[str, str] = field(
        default_factory=lambda: _EMPTY_METADATA, hash=False, compare=False
    )


@dataclass(frozen=True)
class LoadResult:
    """load_all 결과. 로드된 스킬과 문서별 파싱 오류."""

    skills: tuple[Skill, ...] = ()
    errors: tuple[SkillParseError, ...] = ()

    @property
    def names(self) -> list[str]:
        return [skill.name for skill in self.skills]

    def raise_for_errors(self) -> None:
        """수집된 파싱 오류가 있으면 ExceptionGroup으로 다시 발생시킨다."""
        if self.errors:
            raise ExceptionGroup(
                f"{len(self.errors)}개의 스킬 문서를 파싱하지 못했습니다",
                list(self.errors),
            )


def _is_safe_path(path: Path, base_dir: Path) -> bool:
    """경로가 base_dir 내에 안전하게 포함되어 있는지 확인한다.

    심볼릭 링크나 경로 조작을 통한 디렉토리 탐색을 막는다.
    """
    try:
        path.resolve().relative_to(base_dir.resolve())
        return True
    except ValueError:
        return False
    except (OSError, RuntimeError):
        # 경로 해석 오류 (예: 순환 심볼릭 링크)
        return False


def _validate_skill_name(name: str, expected_name: str) -> tuple[bool, str]:
    """Agent Skills 명세에 따라 스킬 이름을 검증한다.

    요구사항:
    - 최대 64자
    - 소문자 영숫자와 단일 하이픈만 (a-z, 0-9, -)
    - 부모 디렉토리 이름(또는 파일 이름)과 일치

    Returns:
        (is_valid, error_message) 튜플. 유효하면 에러 메시지는 빈 문자열.
    """
    if len(name) > MAX_SKILL_NAME_LENGTH:
        return False, "이름이 64자를 초과합니다"
    if not _NAME_PATTERN.match(name):
        return False, "이름은 소문자 영숫자와 단일 하이픈만 사용해야 합니다"
    if name != expected_name:
        return False, f"이름 '{name}'은 '{expected_name}'과 일치해야 합니다"
    return True, ""


def _optional_str(value: Any) -> str | None:
    return None if value is None else str(value)


def _required_str(value: Any) -> str:
    return "" if value is None else str(value).strip()


def _coerce_metadata(value: Any) -> Mapping[str, str]:
    """프론트매터 metadata를 읽기 전용 문자열 매핑으로 바꾼다."""
    if not isinstance(value, Mapping):
        return _EMPTY_METADATA
    return MappingProxyType({str(k): str(v) for k, v in value.items() if v is not None})


def split_front_matter(content: str, path: str | Path = "<string>") -> tuple[dict[str, Any], str]:
    """문서를 YAML 프론트매터 매핑과 본문으로 나눈다.

    Raises:
        SkillParseError: 프론트매터가 없거나, YAML이 잘못되었거나, 매핑이 아닐 때.
    """
    match = _FRONTMATTER_PATTERN.match(content)
    if not match:
        raise SkillParseError(path, "유효한 YAML 프론트매터를 찾을 수 없음")

    # 적절한 중첩 구조 지원을 위해 safe_load로 YAML 파싱
    try:
        front_matter = yaml.safe_load(match.group(1))
    except yaml.YAMLError as e:
        raise SkillParseError(path, f"YAML이 유효하지 않음: {e}") from e

    if not isinstance(front_matter, dict):
        raise SkillParseError(path, "프론트매터가 매핑이 아님")

    return front_matter, content[match.end() :].strip()


def parse_skill_file(skill_md_path: Path, source: str = "project") -> Skill:
    """스킬 문서 하나를 파싱한다.

    Args:
        skill_md_path: 마크다운 문서 경로
        source: 스킬 출처 ('user' 또는 'project')

    Returns:
        모든 필드가 채워진 Skill

    Raises:
        SkillParseError: 문서를 읽을 수 없거나 필수 메타데이터가 없을 때.
    """
    skill_md_path = Path(skill_md_path)
    try:
        # 보안: DoS 방지를 위한 파일 크기 확인
        file_size = skill_md_path.stat().st_size
        if file_size > MAX_SKILL_FILE_SIZE:
            raise SkillParseError(skill_md_path, f"파일이 너무 큼 ({file_size} 바이트)")

        content = skill_md_path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        raise SkillParseError(skill_md_path, f"읽기 오류: {e}") from e

    front_matter, body = split_front_matter(content, skill_md_path)

    name_str = _required_str(front_matter.get("name"))
    description_str = _required_str(front_matter.get("description"))
    # 공백뿐인 값도 누락으로 취급
    missing = [
        key
        for key, value in (("name", name_str), ("description", description_str))
        if not value
    ]
    if missing:
        raise SkillParseError(
            skill_md_path, f"필수 필드 누락: {', '.join(missing)}"
        )

    expected_name = (
        skill_md_path.parent.name
        if skill_md_path.name == SKILL_FILE_NAME
        else skill_md_path.stem
    )
    # 명세에 따른 이름 형식 검증 (역호환성을 위해 경고하지만 로드)
    is_valid, error = _validate_skill_name(name_str, expected_name)
    if not is_valid:
        logger.warning(
            "'%s' 스킬 (%s)이 Agent Skills 명세를 따르지 않음: %s",
            name_str,
            skill_md_path,
            error,
        )

    if len(description_str) > MAX_SKILL_DESCRIPTION_LENGTH:
        logger.warning(
            "%s의 설명이 %d자를 초과하여 잘림",
            skill_md_path,
            MAX_SKILL_DESCRIPTION_LENGTH,
        )
        description_str = description_str[:MAX_SKILL_DESCRIPTION_LENGTH]

    return Skill(
        name=name_str,
        description=description_str,
        body=body,
        trigger_keywords=extract_trigger_keywords(front_matter, description_str),
        path=str(skill_md_path),
        source=source,
        license=_optional_str(front_matter.get("license")),
        compatibility=_optional_str(front_matter.get("compatibility")),
        allowed_tools=_optional_str(front_matter.get("allowed-tools")),
        metadata=_coerce_metadata(front_matter.get("metadata")),
    )


def iter_skill_documents(skills_dir: Path) -> Iterator[Path]:
    """스킬 디렉토리에서 스킬 문서 경로를 이름 순으로 나열한다.

    최상위 `*.md` 파일과 `<하위 디렉토리>/SKILL.md`를 스킬 문서로 본다.
    숨김 항목과 디렉토리 밖을 가리키는 심볼릭 링크는 건너뛴다.
    """
    try:
        resolved_base = skills_dir.resolve()
    except (OSError, RuntimeError):
        return

    for entry in sorted(skills_dir.iterdir()):
        if entry.name.startswith("."):
            continue

        # 보안: 스킬 디렉토리 외부를 가리키는 심볼릭 링크 포착
        if not _is_safe_path(entry, resolved_base):
            logger.warning("%s 건너뜀: 스킬 디렉토리 밖을 가리킴", entry)
            continue

        if entry.is_dir():
            candidate = entry / SKILL_FILE_NAME
            if candidate.is_file() and _is_safe_path(candidate, resolved_base):
                yield candidate
        elif entry.is_file() and entry.suffix.lower() == ".md":
            yield entry


def load_all(skills_dir: str | Path, source: str = "project") -> LoadResult:
    """디렉토리의 모든 스킬 문서를 로드한다.

    파싱에 실패한 문서는 LoadResult.errors에 기록되고 나머지 문서는 계속 로드된다.

    Args:
        skills_dir: 스킬 디렉토리 경로
        source: 스킬 출처 ('user' 또는 'project')

    Returns:
        이름 순으로 정렬된 스킬과 문서별 파싱 오류

    Raises:
        SkillNotFoundError: 디렉토리가 없거나 스킬 문서가 하나도 없을 때.
        DuplicateSkillError: 두 문서가 같은 name을 가질 때.
    """
    skills_dir = Path(skills_dir).expanduser()
    if not skills_dir.is_dir():
        raise SkillNotFoundError(skills_dir, "스킬 디렉토리가 존재하지 않습니다")

    documents = list(iter_skill_documents(skills_dir))
    if not documents:
        raise SkillNotFoundError(skills_dir)

    skills: dict[str, Skill] = {}
    errors: list[SkillParseError] = []

    for document in documents:
        try:
            skill = parse_skill_file(document, source=source)
        except SkillParseError as e:
            logger.warning("%s 건너뜀: %s", e.path, e.reason)
            errors.append(e)
            continue

        if skill.name in skills:
            raise DuplicateSkillError(skill.name, skills[skill.name].path, skill.path)
        skills[skill.name] = skill

    return LoadResult(
        skills=tuple(sorted(skills.values(), key=lambda s: s.name)),
        errors=tuple(errors),
    )


def list_skills(
    *,
    user_skills_dir: Path | None = None,
    project_skills_dir: Path | None = None,
) -> list[Skill]:
    """사용자 및/또는 프로젝트 디렉토리에서 스킬을 나열한다.

    두 디렉토리가 모두 제공되면, 사용자 스킬과 동일한 이름의 프로젝트 스킬이
    사용자 스킬을 오버라이드한다. 존재하지 않거나 비어 있는 디렉토리는 무시한다.

    Returns:
        이름 순으로 정렬된 병합 스킬 목록
    """
    all_skills: dict[str, Skill] = {}

    for skills_dir, source in ((user_skills_dir, "user"), (project_skills_dir, "project")):
        if not skills_dir:
            continue
        try:
            result = load_all(skills_dir, source=source)
        except SkillNotFoundError as e:
            logger.debug("%s 스킬 없음: %s", source, e)
            continue
        for skill in result.skills:
            # 프로젝트 스킬이 같은 이름의 사용자 스킬을 오버라이드
            all_skills[skill.name] = skill

    return sorted(all_skills.values(), key=lambda s: s.name)
