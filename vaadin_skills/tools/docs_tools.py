"""
Documentation tools — search and full-page retrieval.
"""

from typing import List, Optional, Union

from vaadin_skills.docs import get_library
from vaadin_skills.tools._common import respond

_VERSION_PROPERTY = {
    "type": "string",
    "description": "Vaadin major version, e.g. \"25\" (default: 25)",
}

# ---------------------------------------------------------------------------
# Tool definitions
# ---------------------------------------------------------------------------

TOOLS = [
    {
        "name": "search_vaadin_docs",
        "description": (
            "Search the official Vaadin documentation. Returns ranked matches with "
            "document ids, section headings and text snippets. Use get_full_document "
            "to read a whole page afterwards."
        ),
        "input_schema": {
            "type": "object",
            "properties": {
                "question": {
                    "type": "string",
                    "description": "Question or keywords (e.g. 'grid lazy data provider')",
                },
                "vaadin_version": _VERSION_PROPERTY,
                "ui_language": {
                    "type": "string",
                    "enum": ["java", "react", "common"],
                    "description": "UI language of the application (default: java)",
                },
                "max_results": {
                    "type": "integer",
                    "description": "Maximum number of results, 1-20 (default: 5)",
                },
                "max_tokens": {
                    "type": "integer",
                    "description": "Approximate token budget for all snippets (default: 1500)",
                },
            },
            "required": ["question"],
        },
    },
    {
        "name": "get_full_document",
        "description": (
            "Return the complete text of one or more documentation pages by document id "
            "(as returned by search_vaadin_docs, e.g. 'components/button/index')."
        ),
        "input_schema": {
            "type": "object",
            "properties": {
                "document_ids": {
                    "oneOf": [
                        {"type": "string"},
                        {"type": "array", "items": {"type": "string"}},
                    ],
                    "description": "One document id or a list of ids to fetch",
                },
                "vaadin_version": _VERSION_PROPERTY,
            },
            "required": ["document_ids"],
        },
    },
]


# ---------------------------------------------------------------------------
# Handler functions
# ---------------------------------------------------------------------------

def handle_search_vaadin_docs(
    question: str,
    vaadin_version: Optional[str] = None,
    ui_language: Optional[str] = None,
    max_results: int = 5,
    max_tokens: int = 1500,
) -> str:
    """Search the Vaadin documentation."""
    return respond(
        lambda: get_library().search(
            question,
            vaadin_version=vaadin_version,
            ui_language=ui_language,
            max_results=max_results,
            max_tokens=max_tokens,
        )
    )


def handle_get_full_document(document_ids: Union[str, List[str]], vaadin_version: Optional[str] = None) -> str:
    """Fetch complete documentation pages."""
    return respond(lambda: get_library().get_documents(document_ids, vaadin_version=vaadin_version))


HANDLERS = {
    "search_vaadin_docs": handle_search_vaadin_docs,
    "get_full_document": handle_get_full_document,
}
