"""스킬 로딩 중 발생하는 예외 정의."""

from __future__ import annotations

from pathlib import Path


class SkillError(Exception):
    """스킬 관련 모든 예외의 기본 클래스."""


class SkillParseError(SkillError, ValueError):
    """스킬 문서 하나를 파싱할 수 없을 때 발생한다.

    문서 단위 오류이므로 load_all은 이 예외를 수집하고 나머지 문서는 계속 로드한다.
    """

    def __init__(self, path: str | Path, reason: str) -> None:
        self.path = str(path)
        self.reason = reason
        super().__init__(f"{self.path}: {reason}")


class SkillNotFoundError(SkillError, FileNotFoundError):
    """스킬 디렉토리에 문서가 하나도 없을 때 발생한다."""

    def __init__(self, directory: str | Path, reason: str = "스킬 문서가 없습니다") -> None:
        self.directory = str(directory)
        super().__init__(f"{self.directory}: {reason}")


class DuplicateSkillError(SkillError, ValueError):
    """같은 이름의 스킬이 두 번 등록될 때 발생한다."""

    def __init__(self, name: str, *paths: str) -> None:
        self.name = name
        self.paths = paths
        msg = f"스킬 '{name}'은(는) 이미 등록되어 있습니다"
        if paths:
            msg += f" ({', '.join(paths)})"
        super().__init__(msg)
