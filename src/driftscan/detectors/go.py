"""Go detector: Gin, Echo, Fiber, Chi, gorilla/mux and net/http routes."""

import re

from driftscan.detectors.base import LanguageDetector, find_closing, handler_name, split_params
from driftscan.models import HTTP_METHODS, FunctionSignature, Language, ParameterSpec, ReturnSpec, Visibility

_VERBS = "|".join(HTTP_METHODS)

# router.GET("/path", h) / e.POST(...) / app.Get(...) / r.Delete(...)
FRAMEWORK_ROUTE = re.compile(
    r"\b(\w+)\.(" + _VERBS + r"|Get|Post|Put|Delete|Patch|Options|Head)\s*\(\s*\"(/[^\"]*)\"(.*)"
)
# http.HandleFunc("/path", h) / mux.Handle("GET /users/{id}", h)
HANDLE_ROUTE = re.compile(r"\b(\w+)\.(HandleFunc|Handle)\s*\(\s*\"([^\"]+)\"(.*)")
GORILLA_METHODS = re.compile(r"\.Methods\s*\(([^)]*)\)")
QUOTED = re.compile(r"\"([^\"]*)\"")

FUNC_DECL = re.compile(r"^func\s+(?:\(([^)]*)\)\s*)?([A-Za-z_]\w*)\s*(?:\[[^\]]*\]\s*)?\(")
NAMED_RESULT = re.compile(r"^[A-Za-z_]\w*$")
GO_TYPE_KEYWORDS = {"chan", "func", "map", "struct", "interface"}


class GoDetector(LanguageDetector):
    language = Language.GO
    extensions = (".go",)

    def extract_endpoints(self, file_path, content):
        endpoints = []
        for line_num, line in enumerate(content.splitlines(), start=1):
            match = FRAMEWORK_ROUTE.search(line)
            if match:
                args = self._call_args(match.group(4))
                endpoints.append(
                    self._endpoint(match.group(2), match.group(3), handler_name(args), file_path, line_num)
                )
                continue

            match = HANDLE_ROUTE.search(line)
            if match:
                pattern = match.group(3).strip()
                method, _, path = pattern.rpartition(" ")
                if not path.startswith("/"):
                    continue
                methods = [method.upper()] if method else self._gorilla_methods(match.group(4))
                handler = handler_name(self._call_args(match.group(4)))
                for m in methods:
                    endpoints.append(self._endpoint(m, path, handler, file_path, line_num))
        return endpoints

    def extract_functions(self, file_path, content):
        functions = []
        for line_num, line in enumerate(content.splitlines(), start=1):
            line = line.strip()
            if "*testing." in line:
                continue

            match = FUNC_DECL.match(line)
            if not match:
                continue
            open_idx = match.end() - 1
            close_idx = find_closing(line, open_idx)
            if close_idx == -1:
                continue  # parameters continue on the next line

            name = match.group(2)
            params = [
                ParameterSpec(name=n, type=t) for n, t in self._parse_fields(line[open_idx + 1 : close_idx])
            ]
            returns = self._parse_returns(line[close_idx + 1 :])
            visibility = Visibility.PUBLIC if name[0].isupper() else Visibility.PRIVATE

            functions.append(
                FunctionSignature(
                    name=name,
                    parameters=params,
                    returns=returns,
                    file=file_path,
                    line=line_num,
                    visibility=visibility,
                )
            )
        return functions

    def _call_args(self, rest: str) -> str:
        """Arguments after the route string, up to the call's closing paren."""
        depth = 0
        for i, ch in enumerate(rest):
            if ch == "(":
                depth += 1
            elif ch == ")":
                if depth == 0:
                    return rest[:i]
                depth -= 1
        return rest

    def _gorilla_methods(self, rest: str) -> list[str]:
        match = GORILLA_METHODS.search(rest)
        if match:
            methods = [m.upper() for m in QUOTED.findall(match.group(1)) if m.upper() in HTTP_METHODS]
            if methods:
                return methods
        return ["GET"]

    def _parse_fields(self, text: str) -> list[tuple[str, str]]:
        """Parse a Go field list into (name, type) pairs.

        Handles grouped names (``a, b int``) by giving earlier bare names
        the type of the next typed field.
        """
        raw = []
        for part in split_params(text):
            tokens = part.split(None, 1)
            if len(tokens) == 2 and tokens[0] not in GO_TYPE_KEYWORDS and NAMED_RESULT.match(tokens[0]):
                raw.append((tokens[0], tokens[1].strip()))
            else:
                raw.append(("", part))

        fields = []
        next_type = ""
        for name, typ in reversed(raw):
            if name:
                next_type = typ
                fields.append((name, typ))
            elif next_type and NAMED_RESULT.match(typ):
                fields.append((typ, next_type))
            else:
                fields.append(("", typ))
        fields.reverse()
        return fields

    def _parse_returns(self, text: str) -> list[ReturnSpec]:
        text = text.strip()
        if text.endswith("{"):
            text = text[:-1]
        else:
            body = text.find(" {")
            if body != -1:
                text = text[:body]
        text = text.strip()
        if not text:
            return []

        if text.startswith("(") and find_closing(text, 0) == len(text) - 1:
            return [ReturnSpec(type=t, name=n) for n, t in self._parse_fields(text[1:-1])]
        return [ReturnSpec(type=text)]
