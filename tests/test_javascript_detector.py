from pathlib import Path

from driftscan.detectors.javascript import JavaScriptDetector
from driftscan.models import Language, Visibility

FIXTURES = Path(__file__).parent / "fixtures" / "sources"


def _source():
    path = FIXTURES / "server.ts"
    return str(path), path.read_text(encoding="utf-8")


class TestJavaScriptDetect:
    def test_detects_js_and_ts_variants(self):
        detector = JavaScriptDetector()
        for name in ("a.js", "a.jsx", "a.ts", "a.tsx", "a.mjs", "a.cjs"):
            assert detector.detect(name)
        assert not detector.detect("a.json")


class TestJavaScriptEndpoints:
    def test_express_routes(self):
        endpoints = JavaScriptDetector().extract_endpoints(*_source())
        assert [(e.method, e.path, e.handler) for e in endpoints] == [
            ("GET", "/api/users", "listUsers"),
            ("POST", "/api/users", "createUser"),
            ("DELETE", "/api/users/:id", ""),
        ]
        assert all(e.language is Language.JAVASCRIPT for e in endpoints)

    def test_client_calls_are_not_routes(self):
        content = 'const res = await api.get("/api/users");\naxios.post("/api/users", body);\n'
        assert JavaScriptDetector().extract_endpoints("client.js", content) == []


class TestJavaScriptFunctions:
    def test_extracts_declarations(self):
        functions = JavaScriptDetector().extract_functions(*_source())
        assert [f.name for f in functions] == ["listUsers", "createUser", "find"]

    def test_typed_function(self):
        functions = {f.name: f for f in JavaScriptDetector().extract_functions(*_source())}
        list_users = functions["listUsers"]
        assert [(p.name, p.type) for p in list_users.parameters] == [("req", "Request"), ("res", "Response")]
        assert [r.type for r in list_users.returns] == ["Promise<void>"]

    def test_arrow_function_untyped(self):
        functions = {f.name: f for f in JavaScriptDetector().extract_functions(*_source())}
        create = functions["createUser"]
        assert [(p.name, p.type) for p in create.parameters] == [("req", "any"), ("res", "any")]
        assert create.returns == []

    def test_class_method_visibility_and_generics(self):
        functions = {f.name: f for f in JavaScriptDetector().extract_functions(*_source())}
        find = functions["find"]
        assert find.visibility is Visibility.PRIVATE
        assert [(p.name, p.type) for p in find.parameters] == [
            ("id", "string"),
            ("opts", "Record<string, number>"),
        ]
        assert [r.type for r in find.returns] == ["User"]

    def test_control_flow_is_not_a_method(self):
        content = "if (ready) {\n}\nwhile (x) {\n}\nfor (const a of b) {\n}\n"
        assert JavaScriptDetector().extract_functions("a.js", content) == []

    def test_rest_and_default_parameters(self):
        content = "function merge(target = {}, ...sources) {\n}\n"
        functions = JavaScriptDetector().extract_functions("a.js", content)
        assert [p.name for p in functions[0].parameters] == ["target", "sources"]
