"""
Component tools — Java API surface and styling reference of UI components.
"""

from typing import Optional

from vaadin_skills.docs import get_library
from vaadin_skills.tools._common import respond

_COMPONENT_SCHEMA = {
    "type": "object",
    "properties": {
        "component_name": {
            "type": "string",
            "description": "Component name, e.g. 'Button', 'TextField', 'vaadin-grid'",
        },
        "vaadin_version": {
            "type": "string",
            "description": "Vaadin major version, e.g. \"25\" (default: 25)",
        },
    },
    "required": ["component_name"],
}

TOOLS = [
    {
        "name": "get_component_java_api",
        "description": (
            "Java (Flow) API documentation of a Vaadin UI component, with the classes "
            "and methods used by its code samples. NOT for: React/Hilla views."
        ),
        "input_schema": _COMPONENT_SCHEMA,
    },
    {
        "name": "get_component_styling",
        "description": (
            "Theming and styling documentation of a Vaadin UI component: CSS custom "
            "properties, shadow parts and state attributes."
        ),
        "input_schema": _COMPONENT_SCHEMA,
    },
]


def handle_get_component_java_api(component_name: str, vaadin_version: Optional[str] = None) -> str:
    """Java API of a component."""
    return respond(lambda: get_library().component_java_api(component_name, vaadin_version=vaadin_version))


def handle_get_component_styling(component_name: str, vaadin_version: Optional[str] = None) -> str:
    """Styling reference of a component."""
    return respond(lambda: get_library().component_styling(component_name, vaadin_version=vaadin_version))


HANDLERS = {
    "get_component_java_api": handle_get_component_java_api,
    "get_component_styling": handle_get_component_styling,
}
