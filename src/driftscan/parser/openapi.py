"""OpenAPI / Swagger document parser.

Parses OpenAPI 3.x and Swagger 2.0 documents into documented Endpoint models.
"""

import json
from pathlib import Path

import yaml

from driftscan.models import HTTP_METHODS, ApiParam, Endpoint


def parse_openapi(file_path: Path) -> list[Endpoint]:
    """Parse an OpenAPI/Swagger file into a list of Endpoint.

    Raises OSError or yaml.YAMLError when the file cannot be read or parsed,
    and ValueError when the document is not a mapping.
    """
    file_path = Path(file_path)
    doc = yaml.safe_load(file_path.read_text(encoding="utf-8"))
    if doc is None:
        return []
    if not isinstance(doc, dict):
        raise ValueError(f"{file_path.name} is not an OpenAPI document")

    endpoints = []
    paths = doc.get("paths")
    if not isinstance(paths, dict):
        return []

    for path, path_item in paths.items():
        if not isinstance(path_item, dict):
            continue
        shared_params = _as_list(path_item.get("parameters"))

        for method, operation in path_item.items():
            if not isinstance(method, str) or method.upper() not in HTTP_METHODS:
                continue
            if not isinstance(operation, dict):
                operation = {}

            params = _parse_parameters(shared_params + _as_list(operation.get("parameters")))
            endpoints.append(
                Endpoint(
                    method=method.upper(),
                    path=str(path),
                    description=_text(operation.get("summary")) or _text(operation.get("description")),
                    file=str(file_path),
                    parameters=params,
                    request_body=_parse_request_body(operation),
                    response_body=_parse_response_body(operation.get("responses")),
                )
            )

    return endpoints


def _as_list(value) -> list:
    return value if isinstance(value, list) else []


def _text(value) -> str:
    return value if isinstance(value, str) else ""


def _parse_parameters(params: list) -> list[ApiParam]:
    result = {}
    for p in params:
        if not isinstance(p, dict) or not isinstance(p.get("name"), str):
            continue  # unresolved $ref
        location = _text(p.get("in")) or "query"
        if location == "body":
            continue
        schema = p.get("schema") if isinstance(p.get("schema"), dict) else {}
        # operation-level parameters override path-level ones
        result[(p["name"], location)] = ApiParam(
            name=p["name"],
            location=location,
            required=p.get("required") is True,
            param_type=_text(schema.get("type")) or _text(p.get("type")) or "string",
            description=_text(p.get("description")),
        )
    return list(result.values())


def _parse_request_body(operation: dict) -> str | None:
    body = operation.get("requestBody")
    if body:
        content = body.get("content") if isinstance(body, dict) else None
        if not isinstance(content, dict):
            return None
        for content_type in ("application/json", "multipart/form-data"):
            if isinstance(content.get(content_type), dict):
                return _dump_schema(content[content_type].get("schema"))
        # Fallback: first available schema
        for ct_data in content.values():
            if isinstance(ct_data, dict):
                return _dump_schema(ct_data.get("schema"))
        return None

    # Swagger 2.0: body parameter
    for p in _as_list(operation.get("parameters")):
        if isinstance(p, dict) and p.get("in") == "body":
            return _dump_schema(p.get("schema"))
    return None


def _parse_response_body(responses) -> str | None:
    if not isinstance(responses, dict):
        return None
    for status_code in sorted(responses, key=str):
        if not str(status_code).startswith("2"):
            continue
        resp = responses[status_code]
        if not isinstance(resp, dict):
            continue
        if "schema" in resp:
            return _dump_schema(resp["schema"])
        content = resp.get("content")
        if not isinstance(content, dict):
            continue
        for ct_data in content.values():
            if isinstance(ct_data, dict):
                return _dump_schema(ct_data.get("schema"))
    return None


def _dump_schema(schema) -> str | None:
    if schema is None:
        return None
    try:
        return json.dumps(schema, sort_keys=True, default=str)
    except TypeError:
        # mixed key types cannot be sorted
        return json.dumps(schema, default=str)
