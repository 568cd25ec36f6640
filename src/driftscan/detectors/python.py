"""Python detector: Flask, FastAPI and Django routes."""

import re

from driftscan.detectors.base import LanguageDetector, RoutePairing, split_params, strip_default
from driftscan.models import HTTP_METHODS, FunctionSignature, Language, ParameterSpec, ReturnSpec, Visibility

# @app.route("/path", methods=["GET", "POST"]) / @router.get("/path") / @bp.api_route(...)
DECORATOR_ROUTE = re.compile(
    r"^@\s*[\w.]*?(\w+)\.(route|api_route|get|post|put|delete|patch|options|head)\s*\(\s*[rbuf]?[\"']([^\"']*)[\"'](.*)"
)
METHODS_KWARG = re.compile(r"methods\s*=\s*[\[\(\{]([^\]\)\}]*)")
QUOTED = re.compile(r"[\"'](\w+)[\"']")
# path("users/", views.list_users) / re_path(r"^users/$", ...) / url(r"^users$", ...)
DJANGO_ROUTE = re.compile(r"(?<![\w.])(re_path|path|url)\s*\(\s*r?[\"']([^\"']*)[\"']\s*,\s*([\w.]+)")

FUNC_DECL = re.compile(r"^(?:async\s+)?def\s+(\w+)\s*(?:\[[^\]]*\])?\((.*?)\)\s*(?:->\s*(.+?))?\s*:")
SKIPPED_PARAMS = {"self", "cls", "*", "/"}


class PythonDetector(LanguageDetector):
    language = Language.PYTHON
    extensions = (".py",)

    def extract_endpoints(self, file_path, content):
        endpoints = []
        pairing = RoutePairing()

        for line_num, line in enumerate(content.splitlines(), start=1):
            stripped = line.strip()

            match = DECORATOR_ROUTE.match(stripped)
            if match:
                pairing.annotate(self._decorator_methods(match.group(2), match.group(4)), match.group(3), line_num)
                continue

            if pairing.awaiting:
                func = FUNC_DECL.match(stripped) or re.match(r"^(?:async\s+)?def\s+(\w+)", stripped)
                if func:
                    route = pairing.consume()
                    for method in route.methods:
                        endpoints.append(self._endpoint(method, route.path, func.group(1), file_path, line_num))
                continue

            match = DJANGO_ROUTE.search(stripped)
            if match:
                handler = match.group(3)
                if handler == "include":
                    continue
                path = match.group(2)
                if match.group(1) != "path":
                    path = path.lstrip("^").rstrip("$")
                endpoints.append(self._endpoint("GET", path, handler, file_path, line_num))

        return endpoints

    def extract_functions(self, file_path, content):
        functions = []
        for line_num, line in enumerate(content.splitlines(), start=1):
            match = FUNC_DECL.match(line.strip())
            if not match:
                continue

            name = match.group(1)
            returns = []
            if match.group(3):
                returns.append(ReturnSpec(type=match.group(3).strip()))

            private = name.startswith("_") and not (name.startswith("__") and name.endswith("__"))

            functions.append(
                FunctionSignature(
                    name=name,
                    parameters=self._parse_parameters(match.group(2)),
                    returns=returns,
                    file=file_path,
                    line=line_num,
                    visibility=Visibility.PRIVATE if private else Visibility.PUBLIC,
                )
            )
        return functions

    def _decorator_methods(self, verb: str, rest: str) -> tuple[str, ...]:
        if verb not in ("route", "api_route"):
            return (verb.upper(),)
        match = METHODS_KWARG.search(rest)
        if match:
            methods = tuple(m.upper() for m in QUOTED.findall(match.group(1)) if m.upper() in HTTP_METHODS)
            if methods:
                return methods
        return ("GET",)

    def _parse_parameters(self, text: str) -> list[ParameterSpec]:
        params = []
        for part in split_params(text):
            part = strip_default(part)
            if part in SKIPPED_PARAMS:
                continue
            name, sep, annotation = part.partition(":")
            name = name.strip().lstrip("*")
            if not name:
                continue
            params.append(ParameterSpec(name=name, type=annotation.strip() if sep else "Any"))
        return params
