"""JavaScript/TypeScript detector: Express, Koa and Fastify routes."""

import re

from driftscan.detectors.base import LanguageDetector, handler_name, split_params, strip_default
from driftscan.models import FunctionSignature, Language, ParameterSpec, ReturnSpec, Visibility

# app.get('/path', handler) / router.post("/path", auth, create) / fastify.put(`/path`, ...)
ROUTE = re.compile(
    r"\b(app|router|routes|server|fastify|express)\.(get|post|put|delete|patch|options|head)"
    r"\s*\(\s*([\"'`])(/[^\"'`]*)\3\s*(.*)"
)

IDENT = r"[A-Za-z_$][\w$]*"
RETURN_TYPE = r"(?:\s*:\s*([^{=]+?))?"

FUNCTION_DECL = re.compile(
    r"^(?:export\s+)?(?:default\s+)?(?:async\s+)?function\s*\*?\s*(" + IDENT + r")\s*(?:<[^(]*>)?\s*\((.*?)\)"
    + RETURN_TYPE + r"\s*(?:\{.*)?$"
)
ARROW_DECL = re.compile(
    r"^(?:export\s+)?(?:const|let|var)\s+(" + IDENT + r")\s*(?::[^=]+)?=\s*(?:async\s*)?(?:<[^(]*>)?\s*\((.*?)\)"
    + RETURN_TYPE + r"\s*=>"
)
METHOD_DECL = re.compile(
    r"^(?:(public|private|protected)\s+)?(?:static\s+)?(?:readonly\s+)?(?:async\s+)?\*?"
    r"(?!(?:if|for|while|switch|catch|return|function|with|else|do|typeof|new|await|super|constructor)\b)"
    r"(" + IDENT + r")\s*(?:<[^(]*>)?\s*\((.*?)\)" + RETURN_TYPE + r"\s*\{\s*$"
)

BRACKETS = "()[]{}<>"


class JavaScriptDetector(LanguageDetector):
    language = Language.JAVASCRIPT
    extensions = (".js", ".jsx", ".ts", ".tsx", ".mjs", ".cjs")

    def extract_endpoints(self, file_path, content):
        endpoints = []
        for line_num, line in enumerate(content.splitlines(), start=1):
            match = ROUTE.search(line)
            if match:
                handler = handler_name(match.group(5).lstrip(","))
                endpoints.append(self._endpoint(match.group(2), match.group(4), handler, file_path, line_num))
        return endpoints

    def extract_functions(self, file_path, content):
        functions = []
        for line_num, line in enumerate(content.splitlines(), start=1):
            line = line.strip()

            visibility = Visibility.PUBLIC
            match = FUNCTION_DECL.match(line) or ARROW_DECL.match(line)
            if match:
                name, params_text, return_type = match.group(1), match.group(2), match.group(3)
            else:
                match = METHOD_DECL.match(line)
                if not match:
                    continue
                if match.group(1):
                    visibility = Visibility(match.group(1))
                name, params_text, return_type = match.group(2), match.group(3), match.group(4)

            returns = [ReturnSpec(type=return_type.strip())] if return_type and return_type.strip() else []
            functions.append(
                FunctionSignature(
                    name=name,
                    parameters=self._parse_parameters(params_text),
                    returns=returns,
                    file=file_path,
                    line=line_num,
                    visibility=visibility,
                )
            )
        return functions

    def _parse_parameters(self, text: str) -> list[ParameterSpec]:
        params = []
        for part in split_params(text, BRACKETS):
            part = strip_default(part)
            if part.startswith("{") or part.startswith("["):
                # destructured parameter: keep the pattern as its name
                name, sep, annotation = part, "", ""
                close = part.rfind("}") if part.startswith("{") else part.rfind("]")
                if close != -1 and part[close + 1 :].lstrip().startswith(":"):
                    name = part[: close + 1]
                    sep, annotation = ":", part[close + 1 :].lstrip()[1:]
            else:
                name, sep, annotation = part.partition(":")
            name = name.strip().removeprefix("...").rstrip("?")
            if not name or name == "this":
                continue
            params.append(ParameterSpec(name=name, type=annotation.strip() if sep else "any"))
        return params
