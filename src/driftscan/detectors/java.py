"""Java detector: Spring MVC / Spring Boot mapping annotations."""

import re

from driftscan.detectors.base import LanguageDetector, RoutePairing, find_closing, join_route, split_params
from driftscan.models import FunctionSignature, Language, ParameterSpec, ReturnSpec, Visibility

MAPPING = re.compile(r"^@(Get|Post|Put|Delete|Patch|Request)Mapping\b(.*)")
MAPPING_PATH = re.compile(r"^\s*\(\s*(?:(?:value|path)\s*=\s*)?\{?\s*\"([^\"]*)\"")
REQUEST_METHOD = re.compile(r"RequestMethod\.(GET|POST|PUT|DELETE|PATCH|OPTIONS|HEAD)")
CLASS_DECL = re.compile(r"^(?:(?:public|protected|private|abstract|final|static)\s+)*(?:class|interface)\s+(\w+)")

MODIFIERS = r"(?:(?:static|final|abstract|synchronized|native|default|strictfp)\s+)*"
METHOD_DECL = re.compile(
    r"^\s*(?:@\w+(?:\([^)]*\))?\s+)*(?:(public|private|protected)\s+)?" + MODIFIERS
    + r"(?:<[^>]+>\s+)?([\w.$]+(?:<.*?>)?(?:\[\])*)\s+([a-zA-Z_$][\w$]*)\s*\("
)
# constructors backtrack into "public Name(", so modifiers are never return types
NOT_RETURN_TYPES = {
    "return", "new", "else", "throw", "case", "if", "for", "while", "switch", "catch", "do", "try", "yield",
    "public", "private", "protected", "static", "final", "abstract", "synchronized",
}
PARAM_ANNOTATION = re.compile(r"@[\w.]+(?:\([^)]*\))?\s*")


class JavaDetector(LanguageDetector):
    language = Language.JAVA
    extensions = (".java",)

    def extract_endpoints(self, file_path, content):
        endpoints = []
        pairing = RoutePairing()
        prefix = ""

        for line_num, line in enumerate(content.splitlines(), start=1):
            stripped = line.strip()

            match = MAPPING.match(stripped)
            if match:
                kind, args = match.group(1), match.group(2)
                path_match = MAPPING_PATH.match(args)
                path = path_match.group(1) if path_match else ""
                if kind == "Request":
                    methods = tuple(REQUEST_METHOD.findall(args)) or ("GET",)
                else:
                    methods = (kind.upper(),)
                pairing.annotate(methods, path, line_num)
                continue

            if CLASS_DECL.match(stripped):
                # class-level @RequestMapping("/api/...") prefixes every method route
                route_prefix = pairing.consume()
                prefix = route_prefix.path if route_prefix else ""
                continue

            if not pairing.awaiting:
                continue

            method = self._method(stripped)
            if method:
                route = pairing.consume()
                for verb in route.methods:
                    endpoints.append(
                        self._endpoint(verb, join_route(prefix, route.path), method.group(3), file_path, line_num)
                    )

        return endpoints

    def extract_functions(self, file_path, content):
        functions = []
        for line_num, line in enumerate(content.splitlines(), start=1):
            match = self._method(line)
            if not match:
                continue
            close_idx = find_closing(line, match.end() - 1)
            if close_idx == -1:
                continue  # parameters continue on the next line

            return_type = match.group(2)
            returns = [] if return_type == "void" else [ReturnSpec(type=return_type)]
            functions.append(
                FunctionSignature(
                    name=match.group(3),
                    parameters=self._parse_parameters(line[match.end() : close_idx]),
                    returns=returns,
                    file=file_path,
                    line=line_num,
                    visibility=Visibility(match.group(1) or "package"),
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
            part = PARAM_ANNOTATION.sub("", part).strip()
            tokens = part.split()
            if tokens and tokens[0] == "final":
                tokens = tokens[1:]
            if len(tokens) < 2:
                continue
            params.append(ParameterSpec(name=tokens[-1], type=" ".join(tokens[:-1])))
        return params
