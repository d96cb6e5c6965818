"""
Pull JSON structures out of free-form model output.

Models often wrap the requested JSON in prose or Markdown code fences.
The span from the first opening bracket to the last closing bracket is
taken and parsed.
"""

import json
import re
from typing import Any

from site_explorer.core.exceptions import ResponseParseError


_ARRAY_PATTERN = re.compile(r"\[[\s\S]*\]")


def extract_json_array(text: str) -> list[Any]:
    """
    Parse the first JSON array embedded in text.

    The match starts at "[" and ends at "]", so anything that decodes is
    a list.

    Raises:
        ResponseParseError: If no array is present or it does not parse

    Example:
        >>> extract_json_array('Here you go:\\n```json\\n[{"url": "/a"}]\\n```')
        [{'url': '/a'}]
    """
    if not isinstance(text, str):
        raise ResponseParseError(f"Model output is not text: {type(text).__name__}")

    match = _ARRAY_PATTERN.search(text)
    if match is None:
        raise ResponseParseError("No JSON array found in model output", response_text=text)

    try:
        value = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise ResponseParseError(
            f"Invalid JSON array in model output: {e.msg}",
            response_text=text,
        ) from e

    return value
