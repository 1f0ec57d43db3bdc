"""Shared plumbing for tool handlers: every outcome becomes a JSON string."""

import json
import logging
from typing import Callable

from vaadin_skills.docs.errors import DocsError

logger = logging.getLogger(__name__)


def respond(fn: Callable, *args, **kwargs) -> str:
    """Call *fn* and serialize its dict result, or an {"error": ...} object."""
    try:
        result = fn(*args, **kwargs)
    except DocsError as e:
        return json.dumps({"error": str(e)}, ensure_ascii=False)
    except Exception as e:
        logger.exception("Tool call failed")
        return json.dumps({"error": f"{type(e).__name__}: {e}"}, ensure_ascii=False)
    return json.dumps(result, ensure_ascii=False, default=str)
