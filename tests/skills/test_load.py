from pathlib import Path

import pytest

from clickhouse_skills.skills.errors import (
    DuplicateSkillError,
    SkillNotFoundError,
    SkillParseError,
)
from clickhouse_skills.skills.load import (
    MAX_SKILL_DESCRIPTION_LENGTH,
    LoadResult,
    Skill,
    list_skills,
    load_all,
    parse_skill_file,
    split_front_matter,
)


class TestSplitFrontMatter:
    def test_splits_mapping_and_body(self):
        front_matter, body = split_front_matter(
            "---\nname: demo\ndescription: Demo skill\n---\n\n# Title\n\nText\n"
        )

        assert front_matter == {"name": "demo", "description": "Demo skill"}
        assert body == "# Title\n\nText"

    def test_front_matter_at_end_of_file(self):
        front_matter, body = split_front_matter("---\nname: demo\ndescription: d\n---")

        assert front_matter["name"] == "demo"
        assert body == ""

    def test_missing_front_matter(self):
        with pytest.raises(SkillParseError, match="프론트매터"):
            split_front_matter("# Just markdown\n")

    def test_invalid_yaml(self):
        with pytest.raises(SkillParseError, match="YAML"):
            split_front_matter("---\nname: [unclosed\n---\nbody\n")

    def test_front_matter_not_mapping(self):
        with pytest.raises(SkillParseError, match="매핑"):
            split_front_matter("---\n- a\n- b\n---\nbody\n")


class TestParseSkillFile:
    def test_parses_verbatim_fields(self, tmp_path: Path, make_skill):
        path = make_skill(
            tmp_path,
            "clickhouse-ttl",
            "Expire old rows with TTL. Triggers on: TTL, retention.",
            body="# TTL\n\nUse TTL with partitions.\n",
            extra="license: MIT\nallowed-tools: Read Grep\nmetadata:\n  owner: data\n",
        )

        skill = parse_skill_file(path)

        assert isinstance(skill, Skill)
        assert skill.name == "clickhouse-ttl"
        assert skill.description == "Expire old rows with TTL. Triggers on: TTL, retention."
        assert skill.body == "# TTL\n\nUse TTL with partitions."
        assert skill.path == str(path)
        assert skill.source == "project"
        assert skill.license == "MIT"
        assert skill.allowed_tools == "Read Grep"
        assert skill.metadata == {"owner": "data"}
        assert "retention" in skill.trigger_keywords

    def test_missing_name(self, tmp_path: Path):
        path = tmp_path / "broken.md"
        path.write_text("---\ndescription: no name here\n---\nbody\n", encoding="utf-8")

        with pytest.raises(SkillParseError) as excinfo:
            parse_skill_file(path)

        assert excinfo.value.path == str(path)
        assert "name" in excinfo.value.reason

    def test_missing_description(self, tmp_path: Path):
        path = tmp_path / "broken.md"
        path.write_text("---\nname: broken\n---\nbody\n", encoding="utf-8")

        with pytest.raises(SkillParseError, match="description"):
            parse_skill_file(path)

    def test_blank_name(self, tmp_path: Path):
        path = tmp_path / "blank.md"
        path.write_text('---\nname: "   "\ndescription: Has a description\n---\nbody\n', encoding="utf-8")

        with pytest.raises(SkillParseError) as excinfo:
            parse_skill_file(path)

        assert "name" in excinfo.value.reason

    def test_blank_description(self, tmp_path: Path):
        path = tmp_path / "blank.md"
        path.write_text('---\nname: blank\ndescription: "  \\t "\n---\nbody\n', encoding="utf-8")

        with pytest.raises(SkillParseError, match="description"):
            parse_skill_file(path)

    def test_metadata_is_read_only(self, tmp_path: Path, make_skill):
        path = make_skill(tmp_path, "owned", "Has metadata", extra="metadata:\n  owner: data\n")

        skill = parse_skill_file(path)

        with pytest.raises(TypeError):
            skill.metadata["owner"] = "someone-else"
        assert skill.metadata["owner"] == "data"

    def test_metadata_defaults_to_empty_read_only(self, tmp_path: Path, make_skill):
        skill = parse_skill_file(make_skill(tmp_path, "plain", "No metadata"))

        assert dict(skill.metadata) == {}
        with pytest.raises(TypeError):
            skill.metadata["owner"] = "data"

    def test_unreadable_file(self, tmp_path: Path):
        with pytest.raises(SkillParseError, match="읽기 오류"):
            parse_skill_file(tmp_path / "missing.md")

    def test_invalid_utf8(self, tmp_path: Path):
        path = tmp_path / "binary.md"
        path.write_bytes(b"---\nname: x\n---\n\xff\xfe\xfa")

        with pytest.raises(SkillParseError):
            parse_skill_file(path)

    def test_long_description_is_truncated(self, tmp_path: Path, make_skill):
        path = make_skill(tmp_path, "long-skill", "x" * 2000)

        skill = parse_skill_file(path)

        assert len(skill.description) == MAX_SKILL_DESCRIPTION_LENGTH

    def test_nonconforming_name_still_loads(self, tmp_path: Path, make_skill, caplog):
        path = make_skill(tmp_path, "Odd_Name", "Still loads")

        with caplog.at_level("WARNING"):
            skill = parse_skill_file(path)

        assert skill.name == "Odd_Name"
        assert "Odd_Name" in caplog.text

    def test_source_is_recorded(self, tmp_path: Path, make_skill):
        path = make_skill(tmp_path, "user-skill", "From the user directory")

        assert parse_skill_file(path, source="user").source == "user"


class TestLoadAll:
    def test_one_skill_per_document(self, skills_dir: Path):
        result = load_all(skills_dir)

        assert isinstance(result, LoadResult)
        assert result.names == [
            "clickhouse-materialized-views",
            "clickhouse-query-optimization",
            "clickhouse-schema-design",
        ]
        assert result.errors == ()

    def test_description_verbatim(self, skills_dir: Path):
        result = load_all(skills_dir)
        by_name = {s.name: s for s in result.skills}

        assert (
            by_name["clickhouse-query-optimization"].description
            == "Query tuning. Triggers on: slow, JOIN, PREWHERE."
        )

    def test_flat_markdown_files(self, tmp_path: Path, make_skill):
        make_skill(tmp_path, "alpha", "First", as_directory=False)
        make_skill(tmp_path, "beta", "Second", as_directory=False)

        result = load_all(tmp_path)

        assert result.names == ["alpha", "beta"]

    def test_missing_name_reports_error_and_keeps_valid(self, skills_dir: Path):
        bad = skills_dir / "nameless" / "SKILL.md"
        bad.parent.mkdir()
        bad.write_text("---\ndescription: no name\n---\nbody\n", encoding="utf-8")

        result = load_all(skills_dir)

        assert len(result.skills) == 3
        assert len(result.errors) == 1
        assert isinstance(result.errors[0], SkillParseError)
        assert result.errors[0].path == str(bad)

    def test_blank_names_are_errors_not_duplicates(self, skills_dir: Path):
        for stem in ("blank-one", "blank-two"):
            (skills_dir / f"{stem}.md").write_text(
                "---\nname: ' '\ndescription: Whitespace name\n---\nbody\n", encoding="utf-8"
            )

        result = load_all(skills_dir)

        assert len(result.skills) == 3
        assert "" not in result.names
        assert sorted(Path(e.path).name for e in result.errors) == ["blank-one.md", "blank-two.md"]

    def test_raise_for_errors(self, skills_dir: Path):
        (skills_dir / "broken.md").write_text("no front matter", encoding="utf-8")

        result = load_all(skills_dir)

        with pytest.raises(ExceptionGroup) as excinfo:
            result.raise_for_errors()
        assert all(isinstance(e, SkillParseError) for e in excinfo.value.exceptions)

    def test_raise_for_errors_without_errors(self, skills_dir: Path):
        load_all(skills_dir).raise_for_errors()

    def test_duplicate_names(self, tmp_path: Path, make_skill):
        make_skill(tmp_path, "same-name", "First")
        (tmp_path / "other.md").write_text(
            "---\nname: same-name\ndescription: Second\n---\n", encoding="utf-8"
        )

        with pytest.raises(DuplicateSkillError) as excinfo:
            load_all(tmp_path)

        assert excinfo.value.name == "same-name"

    def test_empty_directory(self, tmp_path: Path):
        with pytest.raises(SkillNotFoundError):
            load_all(tmp_path)

    def test_nonexistent_directory(self, tmp_path: Path):
        with pytest.raises(SkillNotFoundError):
            load_all(tmp_path / "nope")

    def test_not_found_is_file_not_found(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            load_all(tmp_path)

    def test_ignores_non_markdown_and_hidden(self, tmp_path: Path, make_skill):
        make_skill(tmp_path, "visible", "Shown")
        (tmp_path / "notes.txt").write_text("ignored", encoding="utf-8")
        (tmp_path / ".hidden.md").write_text("ignored", encoding="utf-8")
        (tmp_path / "empty-dir").mkdir()

        result = load_all(tmp_path)

        assert result.names == ["visible"]
        assert result.errors == ()

    def test_skips_symlink_outside_base(self, tmp_path: Path, make_skill):
        outside = tmp_path / "outside"
        outside.mkdir()
        make_skill(outside, "escaped", "Outside")
        base = tmp_path / "skills"
        base.mkdir()
        make_skill(base, "inside", "Inside")
        (base / "escaped").symlink_to(outside / "escaped", target_is_directory=True)

        result = load_all(base)

        assert result.names == ["inside"]


class TestListSkills:
    def test_project_overrides_user(self, tmp_path: Path, make_skill):
        user_dir = tmp_path / "user"
        project_dir = tmp_path / "project"
        make_skill(user_dir, "shared", "User version")
        make_skill(user_dir, "user-only", "Only user")
        make_skill(project_dir, "shared", "Project version")

        skills = list_skills(user_skills_dir=user_dir, project_skills_dir=project_dir)
        by_name = {s.name: s for s in skills}

        assert [s.name for s in skills] == ["shared", "user-only"]
        assert by_name["shared"].description == "Project version"
        assert by_name["shared"].source == "project"
        assert by_name["user-only"].source == "user"

    def test_missing_directories(self, tmp_path: Path):
        assert list_skills(user_skills_dir=tmp_path / "missing") == []

    def test_no_directories(self):
        assert list_skills() == []
