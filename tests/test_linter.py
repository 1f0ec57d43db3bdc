"""Tests for vaadin_skills.skills.linter."""

import shutil

from vaadin_skills.skills.linter import (
    check_brackets,
    check_code_block,
    iter_code_blocks,
    lint_file,
    lint_paths,
    lint_text,
)

from conftest import DOCS_DIR, SKILLS_DIR

GOOD_SKILL = """\
---
name: demo
description: "Use when the user asks about demos."
version: "25"
---

## Instructions

```java
Button b = new Button("Click (me)");
b.addClickListener(e -> Notification.show("}"));
```

```json
{"a": [1, 2]}
```
"""


class TestFrontmatterChecks:

    def test_good_skill_is_clean(self):
        assert lint_text(GOOD_SKILL, "/x/skills/demo.md") == []

    def test_missing_frontmatter(self):
        issues = lint_text("# Title\n\nbody", "/x/skills/demo.md")
        assert [i["message"] for i in issues] == ["missing frontmatter block"]

    def test_unclosed_frontmatter(self):
        issues = lint_text("---\nname: demo\n\nbody", "/x/skills/demo.md")
        assert "not closed" in issues[0]["message"]

    def test_invalid_yaml(self):
        issues = lint_text("---\nname: [oops\n---\nbody", "/x/skills/demo.md")
        assert "not valid YAML" in issues[0]["message"]

    def test_missing_description(self):
        text = "---\nname: demo\n---\nbody"
        messages = [i["message"] for i in lint_text(text, "/x/skills/demo.md")]
        assert "'description' is missing or empty" in messages

    def test_name_must_match_file_stem(self):
        issues = lint_text(GOOD_SKILL, "/x/skills/other.md")
        assert any("does not match 'other'" in i["message"] for i in issues)

    def test_name_must_match_skill_dir(self):
        assert lint_text(GOOD_SKILL, "/x/external/demo/SKILL.md") == []
        issues = lint_text(GOOD_SKILL, "/x/external/else/SKILL.md")
        assert any("does not match 'else'" in i["message"] for i in issues)

    def test_name_case(self):
        text = GOOD_SKILL.replace("name: demo", "name: Demo")
        issues = lint_text(text, "/x/skills/Demo.md")
        assert any("kebab or snake case" in i["message"] for i in issues)

    def test_version_must_be_scalar(self):
        text = GOOD_SKILL.replace('version: "25"', "version: [25]")
        issues = lint_text(text, "/x/skills/demo.md")
        assert any("'version'" in i["message"] for i in issues)

    def test_version_must_not_be_boolean(self):
        text = GOOD_SKILL.replace('version: "25"', "version: true")
        issues = lint_text(text, "/x/skills/demo.md")
        assert [i["message"] for i in issues] == ["'version' must be a string or number"]

    def test_empty_body(self):
        text = "---\nname: demo\ndescription: d\n---\n\n"
        issues = lint_text(text, "/x/skills/demo.md")
        assert [i["message"] for i in issues] == ["document body is empty"]

    def test_page_unknown_framework(self):
        text = "---\ntitle: T\nframework: angular\n---\n\nbody"
        issues = lint_text(text, "/x/docs/25/t.md", kind="page")
        assert issues[0]["message"] == "unknown framework 'angular'"


class TestCodeBlocks:

    def test_iter_code_blocks(self):
        body = "text\n```java\nint a;\n```\n\n~~~\nplain\n~~~\n"
        blocks = list(iter_code_blocks(body, first_line=10))
        assert blocks == [("java", "int a;", 11, True), ("", "plain", 15, True)]

    def test_unclosed_block(self):
        text = "---\nname: demo\ndescription: d\n---\n\n```java\nint a;\n"
        issues = lint_text(text, "/x/skills/demo.md")
        assert issues == [{
            "level": "error", "path": "/x/skills/demo.md", "line": 6,
            "message": "code block is not closed",
        }]

    def test_unbalanced_java_reports_line(self):
        text = "---\nname: demo\ndescription: d\n---\n\n## Instructions\n\n```java\nfoo(;\n```\n"
        issues = lint_text(text, "/x/skills/demo.md")
        assert len(issues) == 1
        assert issues[0]["line"] == 9
        assert "unclosed '('" in issues[0]["message"]

    def test_invalid_json(self):
        assert check_code_block("json", '{"a": }') is not None

    def test_invalid_yaml_sample(self):
        assert check_code_block("yaml", "a: [1, 2") is not None

    def test_yaml_multi_document(self):
        assert check_code_block("yaml", "a: 1\n---\nb: 2") is None

    def test_xml_fragment_with_siblings(self):
        xml = "<?xml version=\"1.0\"?>\n<dependency><a/></dependency>\n<dependency/>"
        assert check_code_block("xml", xml) is None
        assert check_code_block("xml", "<dependency>") is not None

    def test_python_sample(self):
        assert check_code_block("python", "def f():\n    return 1\n") is None
        assert check_code_block("python", "def f(:\n") is not None

    def test_unknown_language_warning(self):
        text = "---\nname: demo\ndescription: d\n---\n\n```cobol\nDISPLAY 'X'.\n```\n"
        issues = lint_text(text, "/x/skills/demo.md")
        assert [i["level"] for i in issues] == ["warning"]

    def test_unchecked_language(self):
        text = "---\nname: demo\ndescription: d\n---\n\n```bash\necho ((\n```\n"
        assert lint_text(text, "/x/skills/demo.md") == []


class TestBrackets:

    def test_ignores_strings_and_comments(self):
        code = 'String s = "(";  // )\n/* { */ char c = \'{\';\nfoo();'
        assert check_brackets(code, "java") is None

    def test_mismatched_closer(self):
        assert check_brackets("foo(]", "java") == (0, "unbalanced ']'")

    def test_unterminated_string(self):
        assert check_brackets('String s = "abc;\nfoo();', "java") == (0, 'unterminated string literal "')

    def test_text_block(self):
        assert check_brackets('String s = """\n  ( not code\n""";', "java") is None

    def test_template_literal_in_typescript(self):
        assert check_brackets("const s = `a ${b}\n)`;", "ts") is None

    def test_css_double_slash_is_not_comment(self):
        code = "a { background: url(http://x/y.png); }"
        assert check_brackets(code, "css") is None


class TestLintPaths:

    def test_lint_file_unreadable(self, tmp_path):
        issues = lint_file(tmp_path / "missing.md")
        assert issues[0]["level"] == "error"
        assert "unreadable" in issues[0]["message"]

    def test_lint_paths_counts(self, tmp_path):
        skills = tmp_path / "skills"
        skills.mkdir()
        (skills / "demo.md").write_text(GOOD_SKILL, encoding="utf-8")
        (skills / "bad.md").write_text("no frontmatter", encoding="utf-8")
        (skills / "README.md").write_text("# readme", encoding="utf-8")

        report = lint_paths([skills, tmp_path / "nope"])
        assert report["files"] == 2
        assert report["errors"] == 1
        assert report["warnings"] == 0

    def test_repository_corpora_are_clean(self):
        report = lint_paths([SKILLS_DIR, DOCS_DIR], docs_root=DOCS_DIR)
        assert report["files"] >= 15
        assert report["errors"] == 0, report["issues"]

    def test_docs_root_decides_page_or_skill(self, tmp_path):
        pages = tmp_path / "pages"
        skills = tmp_path / "docs" / "skills"
        shutil.copytree(DOCS_DIR, pages)
        skills.mkdir(parents=True)
        (skills / "bad.md").write_text("---\nname: bad\n---\n\n## Instructions\nBody.\n", encoding="utf-8")

        report = lint_paths([pages, skills], docs_root=pages)

        assert report["files"] == 15
        errors = [i for i in report["issues"] if i["level"] == "error"]
        assert [i["message"] for i in errors] == ["'description' is missing or empty"]
        assert errors[0]["path"] == str(skills / "bad.md")

