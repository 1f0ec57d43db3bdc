"""
Version tool — latest released Vaadin version.
"""

from vaadin_skills.docs import get_library
from vaadin_skills.tools._common import respond

TOOLS = [
    {
        "name": "get_vaadin_version",
        "description": "Latest known Vaadin platform version (e.g. '25.0.3') and its major.",
        "input_schema": {
            "type": "object",
            "properties": {},
            "required": [],
        },
    },
]


def handle_get_vaadin_version() -> str:
    return respond(lambda: get_library().latest_version())


HANDLERS = {
    "get_vaadin_version": handle_get_vaadin_version,
}
