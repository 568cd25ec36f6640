import json
from pathlib import Path

import pytest
import yaml

from driftscan.parser.openapi import parse_openapi

FIXTURES = Path(__file__).parent / "fixtures"


class TestOpenApiParser:
    def test_endpoints_count(self):
        endpoints = parse_openapi(FIXTURES / "openapi.yaml")
        assert sorted((e.method, e.path) for e in endpoints) == [
            ("DELETE", "/api/users/{id}"),
            ("GET", "/api/users"),
            ("GET", "/api/users/{id}"),
            ("POST", "/api/users"),
        ]

    def test_summary_then_description(self):
        endpoints = {(e.method, e.path): e for e in parse_openapi(FIXTURES / "openapi.yaml")}
        assert endpoints[("GET", "/api/users")].description == "List users"
        assert endpoints[("GET", "/api/users/{id}")].description == "Fetch one user"

    def test_query_parameter(self):
        endpoints = {(e.method, e.path): e for e in parse_openapi(FIXTURES / "openapi.yaml")}
        limit = endpoints[("GET", "/api/users")].parameters[0]
        assert limit.name == "limit"
        assert limit.location == "query"
        assert limit.required is False
        assert limit.param_type == "integer"

    def test_path_level_parameters_inherited_and_overridden(self):
        endpoints = {(e.method, e.path): e for e in parse_openapi(FIXTURES / "openapi.yaml")}
        get_params = endpoints[("GET", "/api/users/{id}")].parameters
        assert [(p.name, p.location, p.param_type) for p in get_params] == [("id", "path", "string")]
        delete_params = endpoints[("DELETE", "/api/users/{id}")].parameters
        assert [(p.name, p.param_type) for p in delete_params] == [("id", "integer")]

    def test_request_and_response_bodies(self):
        endpoints = {(e.method, e.path): e for e in parse_openapi(FIXTURES / "openapi.yaml")}
        post = endpoints[("POST", "/api/users")]
        assert "name" in json.loads(post.request_body)["properties"]
        assert json.loads(post.response_body) == {"type": "object"}
        assert endpoints[("GET", "/api/users")].request_body is None

    def test_swagger2_body_parameter(self, tmp_path):
        doc = tmp_path / "openapi.yaml"
        doc.write_text(
            "swagger: '2.0'\n"
            "paths:\n"
            "  /pets:\n"
            "    post:\n"
            "      parameters:\n"
            "        - name: pet\n"
            "          in: body\n"
            "          schema: {type: object}\n"
        )
        post = parse_openapi(doc)[0]
        assert post.parameters == []
        assert json.loads(post.request_body) == {"type": "object"}

    def test_empty_document(self, tmp_path):
        doc = tmp_path / "openapi.yaml"
        doc.write_text("")
        assert parse_openapi(doc) == []

    def test_not_a_mapping(self, tmp_path):
        doc = tmp_path / "openapi.yaml"
        doc.write_text("- a\n- b\n")
        with pytest.raises(ValueError):
            parse_openapi(doc)

    def test_invalid_yaml(self, tmp_path):
        doc = tmp_path / "openapi.yaml"
        doc.write_text("paths: {unclosed\n")
        with pytest.raises(yaml.YAMLError):
            parse_openapi(doc)

    def test_paths_not_a_mapping(self, tmp_path):
        doc = tmp_path / "openapi.yaml"
        doc.write_text("paths:\n  - /users\n")
        assert parse_openapi(doc) == []

    def test_wrongly_shaped_sections_are_ignored(self, tmp_path):
        doc = tmp_path / "openapi.yaml"
        doc.write_text(
            "paths:\n"
            "  /users:\n"
            "    parameters: oops\n"
            "    1: {}\n"
            "    post:\n"
            "      requestBody: text\n"
            "      parameters: {name: id}\n"
            "      responses: [200]\n"
            "    get:\n"
            "      requestBody: {content: [x]}\n"
            "      responses: {'200': nope, '201': {content: bad}}\n"
        )
        endpoints = parse_openapi(doc)
        assert [(e.method, e.request_body, e.response_body, e.parameters) for e in endpoints] == [
            ("POST", None, None, []),
            ("GET", None, None, []),
        ]
