import shutil
from pathlib import Path

import pytest

from driftscan.contracts import (
    compare_endpoints,
    endpoint_key,
    load_documented_endpoints,
    normalize_path,
    validate_contracts,
)
from driftscan.models import Endpoint, Severity, WarningType

FIXTURES = Path(__file__).parent / "fixtures"


def _ep(method, path, file="", line=0):
    return Endpoint(method=method, path=path, file=file, line=line)


class TestNormalizePath:
    @pytest.mark.parametrize("path", ["/users/:id", "/users/{id}", "/users/<id>/", "/users/<int:id>", "users/:id"])
    def test_parameter_styles_are_equivalent(self, path):
        assert normalize_path(path) == "/users/{id}"

    def test_root(self):
        assert normalize_path("/") == "/"
        assert normalize_path("") == "/"

    def test_only_one_trailing_slash_stripped(self):
        assert normalize_path("/a/") == "/a"

    def test_endpoint_key(self):
        assert endpoint_key(_ep("get", "/users/:id/")) == "GET /users/{id}"


class TestCompareEndpoints:
    def test_scenario_missing_and_undocumented(self):
        documented = [_ep("GET", "/users/{id}"), _ep("POST", "/users")]
        implemented = [_ep("GET", "/users/:id", "api/handlers.go", 12), _ep("DELETE", "/users/:id", "api/handlers.go", 30)]

        warnings = compare_endpoints(documented, implemented)

        assert [(w.type, w.severity) for w in warnings] == [
            (WarningType.MISSING_ENDPOINT, Severity.ERROR),
            (WarningType.UNDOCUMENTED_ENDPOINT, Severity.WARNING),
        ]
        assert all(w.module == "api" for w in warnings)
        assert "POST /users" in warnings[0].message
        assert "DELETE /users/:id" in warnings[1].message
        assert "handlers.go:30" in warnings[1].message

    def test_duplicates_reported_once(self):
        implemented = [_ep("GET", "/a", "x.py", 1), _ep("GET", "/a/", "y.py", 2)]
        warnings = compare_endpoints([_ep("GET", "/b")], implemented)
        undocumented = [w for w in warnings if w.type == WarningType.UNDOCUMENTED_ENDPOINT]
        assert len(undocumented) == 1
        assert "x.py:1" in undocumented[0].message

    def test_in_sync(self):
        assert compare_endpoints([_ep("GET", "/a")], [_ep("get", "/a/")]) == []


class TestLoadDocumentedEndpoints:
    def test_blueprints_openapi_and_architecture(self, tmp_path):
        blueprints = tmp_path / "blueprints"
        (blueprints / "users").mkdir(parents=True)
        shutil.copy(FIXTURES / "openapi.yaml", blueprints / "users" / "openapi.yaml")
        shutil.copy(FIXTURES / "architecture.md", blueprints / "users" / "Architecture.md")

        endpoints = load_documented_endpoints(blueprints, tmp_path / "foundation")
        assert len(endpoints) == 4 + 3

    def test_foundation_fallback(self, tmp_path):
        foundation = tmp_path / "foundation"
        foundation.mkdir()
        shutil.copy(FIXTURES / "architecture.md", foundation / "ARCHITECTURE.md")

        endpoints = load_documented_endpoints(tmp_path / "blueprints", foundation)
        assert len(endpoints) == 3

    def test_malformed_document_skipped(self, tmp_path):
        blueprints = tmp_path / "blueprints"
        (blueprints / "broken").mkdir(parents=True)
        (blueprints / "broken" / "openapi.yaml").write_text("paths: {unclosed\n")
        (blueprints / "ok").mkdir()
        shutil.copy(FIXTURES / "openapi.yaml", blueprints / "ok" / "openapi.yml")

        endpoints = load_documented_endpoints(blueprints, tmp_path / "foundation")
        assert len(endpoints) == 4

    def test_wrongly_shaped_documents_do_not_abort(self, tmp_path):
        blueprints = tmp_path / "blueprints"
        (blueprints / "bad").mkdir(parents=True)
        (blueprints / "bad" / "openapi.yaml").write_text("paths:\n  - /users\n")
        (blueprints / "body").mkdir()
        (blueprints / "body" / "openapi.yaml").write_text("paths:\n  /x:\n    post: {requestBody: text}\n")
        (blueprints / "ok").mkdir()
        shutil.copy(FIXTURES / "openapi.yaml", blueprints / "ok" / "openapi.yaml")

        endpoints = load_documented_endpoints(blueprints, tmp_path / "foundation")
        assert sorted(endpoint_key(e) for e in endpoints) == [
            "DELETE /api/users/{id}",
            "GET /api/users",
            "GET /api/users/{id}",
            "POST /api/users",
            "POST /x",
        ]

    def test_nothing_documented(self, tmp_path):
        assert load_documented_endpoints(tmp_path / "blueprints", tmp_path / "foundation") == []


class TestValidateContracts:
    def test_no_documentation_no_warnings(self, tmp_path):
        (tmp_path / "main.go").write_text('package main\nfunc main() {\n\tr.GET("/x", h)\n}\n')
        assert validate_contracts(tmp_path, tmp_path / "blueprints", tmp_path / "foundation") == []

    def test_code_against_blueprint(self, tmp_path):
        blueprints = tmp_path / ".driftscan" / "blueprints"
        blueprints.mkdir(parents=True)
        shutil.copy(FIXTURES / "openapi.yaml", blueprints / "openapi.yaml")
        (tmp_path / "src").mkdir()
        shutil.copy(FIXTURES / "sources" / "routes.go", tmp_path / "src" / "routes.go")

        warnings = validate_contracts(tmp_path, blueprints, tmp_path / ".driftscan" / "foundation")

        missing = sorted(w.message for w in warnings if w.type == WarningType.MISSING_ENDPOINT)
        undocumented = [w.message for w in warnings if w.type == WarningType.UNDOCUMENTED_ENDPOINT]
        assert missing == ["API endpoint GET /api/users/{id} is documented but not implemented"]
        assert len(undocumented) == 1
        assert "GET /healthz" in undocumented[0]
