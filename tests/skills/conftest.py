import json
from pathlib import Path

import pytest

from clickhouse_skills.config import BUNDLED_SKILLS_DIR
from clickhouse_skills.skills.registry import SkillRegistry


def write_skill(
    base_dir: Path,
    name: str,
    description: str,
    body: str = "# Body\n",
    extra: str = "",
    *,
    as_directory: bool = True,
) -> Path:
    """테스트용 스킬 문서를 만든다."""
    front_matter = f"---\nname: {name}\ndescription: {json.dumps(description)}\n{extra}---\n\n{body}"
    if as_directory:
        path = base_dir / name / "SKILL.md"
        path.parent.mkdir(parents=True, exist_ok=True)
    else:
        path = base_dir / f"{name}.md"
    path.write_text(front_matter, encoding="utf-8")
    return path


@pytest.fixture
def skills_dir(tmp_path: Path) -> Path:
    base = tmp_path / "skills"
    base.mkdir()
    write_skill(
        base,
        "clickhouse-schema-design",
        "Table design. Triggers on: CREATE TABLE, ORDER BY, LowCardinality.",
        body="# Schema\n\nPick the sorting key first.\n",
    )
    write_skill(
        base,
        "clickhouse-query-optimization",
        "Query tuning. Triggers on: slow, JOIN, PREWHERE.",
        body="# Queries\n\nPut the smaller table on the right.\n",
    )
    write_skill(
        base,
        "clickhouse-materialized-views",
        "Insert-time aggregation. Triggers on: materialized view, rollup.",
        body="# MVs\n\nUse TO target tables.\n",
    )
    return base


@pytest.fixture
def bundled_registry() -> SkillRegistry:
    return SkillRegistry.from_directory(BUNDLED_SKILLS_DIR)


@pytest.fixture
def make_skill():
    return write_skill
