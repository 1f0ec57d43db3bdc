"""Tests for vaadin_skills.tools registry and tool handlers."""

import json

import pytest

from vaadin_skills.skills.registry import SkillRegistry
from vaadin_skills.tools import execute_tool, get_all_tools, get_handler
from vaadin_skills.tools.skill_tools import set_registry

from conftest import SKILLS_DIR

EXPECTED_TOOLS = {
    "search_vaadin_docs",
    "get_full_document",
    "get_component_java_api",
    "get_component_styling",
    "get_vaadin_version",
    "list_skills",
    "find_skills",
    "get_skill",
}


def _run(tool, **args):
    return json.loads(execute_tool(tool, args))


@pytest.fixture
def registry():
    reg = SkillRegistry(str(SKILLS_DIR))
    set_registry(reg)
    return reg


class TestGetAllTools:
    def test_returns_copy(self):
        tools1 = get_all_tools()
        tools2 = get_all_tools()
        assert tools1 is not tools2
        assert tools1 == tools2

    def test_known_tools_present(self):
        names = [t["name"] for t in get_all_tools()]
        assert set(names) == EXPECTED_TOOLS
        assert len(names) == len(set(names))

    def test_each_tool_has_schema_and_handler(self):
        for tool in get_all_tools():
            assert tool["description"], tool["name"]
            schema = tool["input_schema"]
            assert schema["type"] == "object", tool["name"]
            assert set(schema["required"]) <= set(schema["properties"]), tool["name"]
            assert callable(get_handler(tool["name"]))

    def test_unknown_handler(self):
        assert get_handler("nonexistent") is None


class TestExecuteTool:
    def test_unknown_tool(self):
        assert _run("nonexistent_tool") == {"error": "Unknown tool: nonexistent_tool"}

    def test_invalid_arguments(self, registry):
        result = _run("get_skill", nope="x")
        assert result["error"].startswith("Invalid arguments for get_skill")


class TestDocsTools:
    def test_search(self, installed_library):
        result = _run("search_vaadin_docs", question="lazy loading", max_results=3)
        assert result["results"][0]["document_id"] == "components/grid/index"
        assert result["count"] <= 3

    def test_search_error_is_json(self, installed_library):
        result = _run("search_vaadin_docs", question="grid", vaadin_version="23")
        assert result == {"error": "Vaadin version 23 is not available; available versions: 24, 25"}

    def test_get_full_document(self, installed_library):
        result = _run("get_full_document", document_ids=["flow/security"])
        assert result["documents"][0]["title"] == "Securing Flow Applications"
        assert "VaadinWebSecurity" in result["documents"][0]["content"]

    def test_get_full_document_single_id(self, installed_library):
        result = _run("get_full_document", document_ids="flow/security")
        assert [d["document_id"] for d in result["documents"]] == ["flow/security"]

    def test_get_full_document_missing(self, installed_library):
        result = _run("get_full_document", document_ids=["nope"])
        assert "not found" in result["error"]

    def test_component_tools(self, installed_library):
        api = _run("get_component_java_api", component_name="Grid")
        styling = _run("get_component_styling", component_name="Grid", vaadin_version="25")
        assert api["document_id"] == "components/grid/java-api"
        assert "setItems" in api["methods"]
        assert "selected-row" in styling["parts"]

    def test_version_tool(self, installed_library):
        assert _run("get_vaadin_version") == {
            "version": "25.0.3", "major": "25", "source": "config", "released_at": None,
        }

    def test_unexpected_exception_is_reported(self, installed_library, monkeypatch):
        def boom(*args, **kwargs):
            raise RuntimeError("disk on fire")

        monkeypatch.setattr(installed_library, "search", boom)
        assert _run("search_vaadin_docs", question="grid") == {"error": "RuntimeError: disk on fire"}


class TestSkillTools:
    def test_list_skills(self, registry):
        result = _run("list_skills")
        names = [s["name"] for s in result["skills"]]
        assert result["count"] == len(names) >= 6
        assert names == sorted(names)
        assert "prompt" not in result["skills"][0]

    def test_find_skills(self, registry):
        result = _run("find_skills", message="I need a grid with lazy loading")
        assert [s["name"] for s in result["skills"]] == ["vaadin-grid"]
        assert result["skills"][0]["prompt"].startswith("## Instructions")

    def test_find_skills_without_prompt(self, registry):
        result = _run("find_skills", message="secure the login view", include_prompt=False)
        assert [s["name"] for s in result["skills"]] == ["vaadin-security"]
        assert "prompt" not in result["skills"][0]

    def test_find_skills_no_match(self, registry):
        assert _run("find_skills", message="bake a cake") == {"count": 0, "skills": []}

    def test_get_skill(self, registry):
        result = _run("get_skill", name="vaadin-forms")
        assert result["category"] == "flow"
        assert "writeBeanIfValid" in result["prompt"]

    def test_get_unknown_skill(self, registry):
        assert _run("get_skill", name="nope") == {"error": "Unknown skill: nope"}

    def test_registry_built_from_settings(self, monkeypatch, tmp_path):
        (tmp_path / "only-skill.md").write_text(
            "---\nname: only-skill\ndescription: \"Only\"\ntriggers: [only]\n---\n\n## Instructions\nOnly.\n",
            encoding="utf-8",
        )
        monkeypatch.setenv("VAADIN_SKILLS_DIR", str(tmp_path))
        result = _run("list_skills")
        assert [s["name"] for s in result["skills"]] == ["only-skill"]
