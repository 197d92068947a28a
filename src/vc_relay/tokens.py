"""Helpers for reading JWT payloads and JSON paths.

Nothing here checks a signature. Tokens handed to these helpers have already
been validated by the VC Client API; we only read fields out of them.
"""

import base64
import json
import re

_PATH_TOKEN = re.compile(r"\.([A-Za-z_$][\w$-]*)|\[(\d+)\]|\['([^']*)'\]|\[\"([^\"]*)\"\]")


def decode_unverified_token_payload(token: str) -> dict[str, object]:
    """Base64-decode the payload segment of a JWT without verifying it."""
    parts = token.split(".")
    if len(parts) < 2:  # noqa: PLR2004
        raise ValueError("Token does not have a payload segment")
    segment = parts[1].replace("+", "-").replace("/", "_")
    segment += "=" * (-len(segment) % 4)
    payload = json.loads(base64.urlsafe_b64decode(segment).decode("utf-8"))
    if not isinstance(payload, dict):
        raise ValueError("Token payload is not a JSON object")
    return payload


def select_json_path(document: object, path: str) -> object:
    """Resolve a simple JSONPath such as `$.a.b[0]` or `$['a']`."""
    expression = path.strip()
    if expression.startswith("$"):
        expression = expression[1:]
    current = document
    position = 0
    while position < len(expression):
        match = _PATH_TOKEN.match(expression, position)
        if match is None:
            raise ValueError(f"Unsupported JSON path: {path}")
        name, index, quoted, double_quoted = match.groups()
        if index is not None:
            if not isinstance(current, list):
                raise ValueError(f"Path {path} indexes a non-list")
            current = current[int(index)]
        else:
            key = name if name is not None else quoted or double_quoted or ""
            if not isinstance(current, dict) or key not in current:
                raise ValueError(f"Path {path} not found")
            current = current[key]
        position = match.end()
    return current
