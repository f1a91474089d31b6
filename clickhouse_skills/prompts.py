"""스킬 미들웨어와 도구가 사용하는 프롬프트 템플릿 모듈."""

SKILLS_SYSTEM_PROMPT = """

## ClickHouse Skills

You have access to a library of ClickHouse best-practice skills (schema design, query optimization, materialized views).

**Available Skills:**

{skills_list}

{matched_section}

**How to Use Skills:**

1. **Matched skills are already loaded**: If full skill guidance appears above, it was selected for the current request. Follow it before falling back to general knowledge.
2. **Read other skills on demand**: Use `find_skills` to search by topic and `read_skill` to load the full guidance of a skill listed above.
3. **Cite the rule you apply**: When a recommendation comes from a skill, name the skill so the user can look it up.

Note: Skills describe ClickHouse-specific behavior (MergeTree ordering, sparse primary indexes, insert-time materialized views). Prefer them over advice written for row-oriented databases.
"""

MATCHED_SKILLS_SECTION = """**Relevant Skills for this request:**

{skills_context}"""

NO_SKILLS_MESSAGE = "(No skills available. Add Markdown skill documents to {locations})"
