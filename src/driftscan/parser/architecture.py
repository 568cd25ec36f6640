"""Architecture markdown parser.

Extracts documented endpoints from an ARCHITECTURE.md written in this
dialect::

    ### GET /api/users/:id
    Fetch a single user.

    - `fields` (string): comma separated list of fields

    ```json
    {"id": 1, "name": "Ada"}
    ```

The first json block (or one mentioning "request") is the request body,
the next one the response body.
"""

import re
from pathlib import Path

from driftscan.models import HTTP_METHODS, ApiParam, Endpoint

ENDPOINT_HEADING = re.compile(r"^###\s+(" + "|".join(HTTP_METHODS) + r")\s+`?([^\s`]+)`?")
HEADING = re.compile(r"^#{1,3}\s")
PARAM_BULLET = re.compile(r"^[-*]\s+`(\w+)`\s*(?:\(([^)]+)\))?\s*:?\s*(.*)$")
PATH_PARAM = re.compile(r":(\w+)|\{(\w+)\}")


def parse_architecture(file_path: Path) -> list[Endpoint]:
    """Parse an architecture markdown file into a list of Endpoint."""
    file_path = Path(file_path)
    text = file_path.read_text(encoding="utf-8")
    return parse_architecture_text(text, source=str(file_path))


def parse_architecture_text(text: str, source: str = "") -> list[Endpoint]:
    endpoints = []
    current: dict | None = None
    in_block = False
    block_lang = ""
    block_lines: list[str] = []

    for line_num, line in enumerate(text.splitlines(), start=1):
        stripped = line.strip()

        if stripped.startswith("```"):
            if not in_block:
                in_block = True
                block_lang = stripped[3:].strip().lower()
                block_lines = []
            else:
                in_block = False
                if current is not None and block_lang == "json":
                    _assign_body(current, "\n".join(block_lines) + "\n")
            continue

        if in_block:
            block_lines.append(line)
            continue

        match = ENDPOINT_HEADING.match(stripped)
        if match:
            if current is not None:
                endpoints.append(_finish(current))
            current = {
                "method": match.group(1),
                "path": match.group(2),
                "description": "",
                "file": source,
                "line": line_num,
                "parameters": [],
                "request_body": None,
                "response_body": None,
            }
            continue

        if current is None or not stripped:
            continue

        if HEADING.match(stripped):
            # any other section heading closes the endpoint
            endpoints.append(_finish(current))
            current = None
            continue

        param = PARAM_BULLET.match(stripped)
        if param:
            current["parameters"].append(
                ApiParam(
                    name=param.group(1),
                    location="query",
                    param_type=(param.group(2) or "string").strip(),
                    description=param.group(3).strip(),
                )
            )
            continue

        if not current["description"] and not stripped.startswith(("**", "-", "*", "|", ">")):
            current["description"] = stripped

    if current is not None:
        endpoints.append(_finish(current))
    return endpoints


def _assign_body(current: dict, content: str) -> None:
    if current["request_body"] is None or "request" in content.lower():
        current["request_body"] = content
    else:
        current["response_body"] = content


def _finish(current: dict) -> Endpoint:
    """Add path parameters (``:id`` / ``{id}``) as required path params."""
    params = current["parameters"]
    for match in PATH_PARAM.finditer(current["path"]):
        name = match.group(1) or match.group(2)
        documented = next((p for p in params if p.name == name), None)
        params = [p for p in params if p.name != name]
        params.append(
            ApiParam(
                name=name,
                location="path",
                required=True,
                param_type=documented.param_type if documented else "string",
                description=documented.description if documented else f"{name} identifier",
            )
        )
    current["parameters"] = params
    return Endpoint(**current)
