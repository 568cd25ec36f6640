"""Ruby detector: Rails route DSL and Sinatra blocks."""

import re

from driftscan.detectors.base import LanguageDetector, split_params, strip_default
from driftscan.models import FunctionSignature, Language, ParameterSpec, Visibility

# get '/users', to: 'users#index' / post "/users" => "users#create" / get '/users' do
VERB_ROUTE = re.compile(r"^(get|post|put|patch|delete|options|head)\s*\(?\s*['\"]([^'\"]*)['\"](.*)")
ROUTE_TARGET = re.compile(r"(?:\bto:|=>)\s*['\"]([^'\"]+)['\"]")
RESOURCES = re.compile(r"^resources\s*\(?\s*:(\w+)(.*)")
# only: [:index, :show] / only: %i[index show] / except: :destroy
RESOURCE_FILTER = re.compile(
    r"\b(only|except):\s*(?:%[iIwW][\[(]([^\])]*)[\])]|\[([^\]]*)\]|:(\w+))"
)

# action -> (method, member route?)
RESOURCE_ACTIONS = (
    ("index", "GET", False),
    ("create", "POST", False),
    ("show", "GET", True),
    ("update", "PUT", True),
    ("destroy", "DELETE", True),
)

FUNC_DECL = re.compile(r"^(?:(private|protected|public)\s+)?def\s+(self\.)?([A-Za-z_]\w*[!?=]?)\s*(?:\((.*?)\)|\s+(.+))?\s*$")
VISIBILITY_MARKER = re.compile(r"^(private|protected|public)\s*$")
SCOPE_DECL = re.compile(r"^(?:class|module)\s+[A-Z]")


class RubyDetector(LanguageDetector):
    language = Language.RUBY
    extensions = (".rb",)

    def extract_endpoints(self, file_path, content):
        endpoints = []
        for line_num, line in enumerate(content.splitlines(), start=1):
            stripped = line.strip()

            match = RESOURCES.match(stripped)
            if match:
                resource = match.group(1)
                for action, method, member in self._resource_actions(match.group(2)):
                    path = f"/{resource}/:id" if member else f"/{resource}"
                    endpoints.append(self._endpoint(method, path, f"{resource}#{action}", file_path, line_num))
                continue

            match = VERB_ROUTE.match(stripped)
            if match:
                target = ROUTE_TARGET.search(match.group(3))
                handler = target.group(1) if target else ""
                endpoints.append(self._endpoint(match.group(1), match.group(2), handler, file_path, line_num))

        return endpoints

    def extract_functions(self, file_path, content):
        functions = []
        section = Visibility.PUBLIC

        for line_num, line in enumerate(content.splitlines(), start=1):
            stripped = line.strip()

            if SCOPE_DECL.match(stripped):
                section = Visibility.PUBLIC
                continue
            marker = VISIBILITY_MARKER.match(stripped)
            if marker:
                section = Visibility(marker.group(1))
                continue

            match = FUNC_DECL.match(stripped)
            if not match:
                continue

            if match.group(1):
                visibility = Visibility(match.group(1))
            elif match.group(2):
                # private/protected sections do not apply to singleton methods
                visibility = Visibility.PUBLIC
            else:
                visibility = section

            params_text = match.group(4) if match.group(4) is not None else (match.group(5) or "")
            functions.append(
                FunctionSignature(
                    name=match.group(3),
                    parameters=self._parse_parameters(params_text),
                    returns=[],
                    file=file_path,
                    line=line_num,
                    visibility=visibility,
                )
            )
        return functions

    def _resource_actions(self, options: str):
        only = except_ = None
        for match in RESOURCE_FILTER.finditer(options):
            key, words, items, symbol = match.groups()
            if words is not None:
                actions = set(words.split())
            elif items is not None:
                actions = {a.strip().lstrip(":").strip("'\"") for a in items.split(",") if a.strip()}
            else:
                actions = {symbol}
            if key == "only":
                only = actions
            else:
                except_ = actions

        for action, method, member in RESOURCE_ACTIONS:
            if only is not None and action not in only:
                continue
            if except_ is not None and action in except_:
                continue
            yield action, method, member

    def _parse_parameters(self, text: str) -> list[ParameterSpec]:
        params = []
        for part in split_params(text):
            name = strip_default(part).lstrip("*&").partition(":")[0].strip()
            if not name:
                continue
            params.append(ParameterSpec(name=name, type="Object"))
        return params
