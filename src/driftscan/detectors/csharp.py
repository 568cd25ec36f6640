"""C# detector: ASP.NET Core attribute routing and minimal APIs."""

import re

from driftscan.detectors.base import LanguageDetector, RoutePairing, find_closing, handler_name, join_route, split_params
from driftscan.models import FunctionSignature, Language, ParameterSpec, ReturnSpec, Visibility

HTTP_ATTRIBUTE = re.compile(r"\[\s*Http(Get|Post|Put|Delete|Patch|Head|Options)\b(?:\s*\(\s*(?:template\s*:\s*)?\"([^\"]*)\")?")
ROUTE_ATTRIBUTE = re.compile(r"\[\s*Route\s*\(\s*(?:template\s*:\s*)?\"([^\"]*)\"")
# app.MapGet("/users/{id}", handler)
MINIMAL_API = re.compile(r"\b\w+\.Map(Get|Post|Put|Delete|Patch)\s*\(\s*\"([^\"]*)\"(.*)")
CLASS_DECL = re.compile(
    r"^(?:(?:public|internal|protected|private|sealed|abstract|static|partial)\s+)*(?:class|record)\s+(\w+)"
)

MODIFIERS = r"(?:(?:internal|static|async|virtual|override|abstract|sealed|new|partial|extern|unsafe|readonly)\s+)*"
METHOD_DECL = re.compile(
    r"^\s*(?:\[[^\]]*\]\s*)*(?:(public|private|protected|internal)\s+)?" + MODIFIERS
    + r"([\w.]+(?:<.*?>)?(?:\[\])?\??)\s+([A-Za-z_]\w*)\s*(?:<[^>(]*>)?\s*\("
)
# constructors backtrack into "public Name(", so modifiers are never return types
NOT_RETURN_TYPES = {
    "return", "new", "else", "throw", "case", "if", "for", "foreach", "while", "switch", "catch", "using", "lock",
    "await", "var", "yield", "public", "private", "protected", "internal", "static",
}
PARAM_ATTRIBUTE = re.compile(r"\[[^\]]*\]\s*")
PARAM_MODIFIERS = {"ref", "out", "in", "params", "this", "scoped"}


class CSharpDetector(LanguageDetector):
    language = Language.CSHARP
    extensions = (".cs",)

    def extract_endpoints(self, file_path, content):
        endpoints = []
        pairing = RoutePairing()
        prefix = ""

        for line_num, line in enumerate(content.splitlines(), start=1):
            stripped = line.strip()

            match = MINIMAL_API.search(stripped)
            if match:
                handler = handler_name(match.group(3).lstrip(","))
                endpoints.append(self._endpoint(match.group(1), match.group(2), handler, file_path, line_num))
                continue

            attribute = HTTP_ATTRIBUTE.search(stripped)
            route = ROUTE_ATTRIBUTE.search(stripped)
            if attribute or route:
                methods = (attribute.group(1).upper(),) if attribute else ()
                path = attribute.group(2) if attribute and attribute.group(2) is not None else None
                if route and not path:
                    path = route.group(1)
                pairing.annotate(methods, path, line_num)
                continue

            class_match = CLASS_DECL.match(stripped)
            if class_match:
                # a controller without a class-level [Route] has no prefix
                route_prefix = pairing.consume()
                # route tokens expand lowercase
                controller = class_match.group(1).removesuffix("Controller").lower()
                prefix = route_prefix.path.replace("[controller]", controller) if route_prefix else ""
                continue

            if not pairing.awaiting:
                continue

            method = self._method(stripped)
            if method:
                pending = pairing.consume()
                handler = method.group(3)
                path = pending.path.replace("[action]", handler.lower())
                if path.startswith("~/"):
                    path = path[1:]
                elif not path.startswith("/"):
                    path = join_route(prefix, path)
                for verb in pending.methods:
                    endpoints.append(self._endpoint(verb, path, handler, file_path, line_num))

        return endpoints

    def extract_functions(self, file_path, content):
        functions = []
        for line_num, line in enumerate(content.splitlines(), start=1):
            match = self._method(line)
            if not match:
                continue
            close_idx = find_closing(line, match.end() - 1)
            if close_idx == -1:
                continue

            return_type = match.group(2)
            returns = [] if return_type == "void" else [ReturnSpec(type=return_type)]
            functions.append(
                FunctionSignature(
                    name=match.group(3),
                    parameters=self._parse_parameters(line[match.end() : close_idx]),
                    returns=returns,
                    file=file_path,
                    line=line_num,
                    visibility=Visibility(match.group(1) or "private"),
                )
            )
        return functions

    def _method(self, line: str):
        match = METHOD_DECL.match(line)
        if not match or match.group(2) in NOT_RETURN_TYPES or match.group(3) in NOT_RETURN_TYPES:
            return None
        return match

    def _parse_parameters(self, text: str) -> list[ParameterSpec]:
        params = []
        for part in split_params(text, "()[]{}<>"):
            part = PARAM_ATTRIBUTE.sub("", part)
            tokens = part.split("=")[0].split()
            while tokens and tokens[0] in PARAM_MODIFIERS:
                tokens = tokens[1:]
            if len(tokens) < 2:
                continue
            params.append(ParameterSpec(name=tokens[-1], type=" ".join(tokens[:-1])))
        return params
