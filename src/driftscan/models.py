"""Shared data models for drift detection.

Every detector, parser and validator speaks these models: endpoints and
function signatures observed in code or documented in specs, module
descriptors, and the warnings/summary produced by an inspection.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

HTTP_METHODS = ("GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS", "HEAD")


class Language(str, Enum):
    GO = "go"
    PYTHON = "python"
    JAVASCRIPT = "javascript"  # also TypeScript, JSX, TSX
    JAVA = "java"
    CSHARP = "csharp"
    RUBY = "ruby"

    @classmethod
    def from_name(cls, name: str) -> "Language | None":
        """Resolve a language name or common alias, e.g. 'typescript' or 'c#'."""
        key = name.strip().lower()
        key = _LANGUAGE_ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            return None


_LANGUAGE_ALIASES = {
    "golang": "go",
    "py": "python",
    "js": "javascript",
    "ts": "javascript",
    "typescript": "javascript",
    "c#": "csharp",
    "cs": "csharp",
    "rb": "ruby",
}


class Visibility(str, Enum):
    PUBLIC = "public"
    PRIVATE = "private"
    PROTECTED = "protected"
    PACKAGE = "package"


class ApiParam(BaseModel):
    """A documented API parameter (query, path, header, or cookie)."""

    name: str
    location: str = "query"  # query / path / header / cookie
    required: bool = False
    param_type: str = "string"
    description: str = ""


class Endpoint(BaseModel):
    """An HTTP endpoint, either observed in code or documented in a spec."""

    model_config = ConfigDict(frozen=True)

    method: str  # GET / POST / PUT / DELETE / PATCH / OPTIONS / HEAD
    path: str  # raw route, e.g. /api/users/:id
    handler: str = ""
    description: str = ""
    file: str = ""
    line: int = 0
    language: Language | None = None
    parameters: list[ApiParam] = []
    request_body: str | None = None
    response_body: str | None = None


class ParameterSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = ""
    type: str = ""


class ReturnSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: str = ""
    name: str = ""  # named returns (Go)


class FunctionSignature(BaseModel):
    """A function or method declaration extracted from a source file."""

    model_config = ConfigDict(frozen=True)

    name: str
    parameters: list[ParameterSpec] = []
    returns: list[ReturnSpec] = []
    file: str = ""
    line: int = 0
    visibility: Visibility = Visibility.PUBLIC


class FunctionSpec(BaseModel):
    """An expected function signature declared in a module descriptor."""

    name: str
    language: str = ""  # go, python, javascript, java, csharp, ruby
    file_pattern: str = ""  # glob matched against the file's base name
    parameters: list[ParameterSpec] = []
    returns: list[ReturnSpec] = []
    visibility: Visibility | None = None

    @field_validator("parameters", "returns", mode="before")
    @classmethod
    def _none_as_empty(cls, value):
        return [] if value is None else value

    @field_validator("language", "file_pattern", mode="before")
    @classmethod
    def _none_as_blank(cls, value):
        return "" if value is None else value


class ModuleDescriptor(BaseModel):
    """Structured expectations for one foundation module (<module>.module.yaml)."""

    name: str = ""
    description: str = ""
    expected_files: list[str] = []
    expected_dirs: list[str] = []
    patterns: list[str] = []
    expected_functions: list[FunctionSpec] = []

    @field_validator("expected_files", "expected_dirs", "patterns", "expected_functions", mode="before")
    @classmethod
    def _none_as_empty(cls, value):
        return [] if value is None else value

    @field_validator("name", "description", mode="before")
    @classmethod
    def _none_as_blank(cls, value):
        return "" if value is None else value


class WarningType(str, Enum):
    MISSING_MODULE = "MISSING_MODULE"
    EXTRA_CODE = "EXTRA_CODE"
    MISMATCHED_NAME = "MISMATCHED_NAME"
    MISSING_FILE = "MISSING_FILE"
    UNEXPECTED_FILE = "UNEXPECTED_FILE"
    MISSING_ENDPOINT = "MISSING_ENDPOINT"
    UNDOCUMENTED_ENDPOINT = "UNDOCUMENTED_ENDPOINT"
    MISSING_FUNCTION = "MISSING_FUNCTION"
    SIGNATURE_MISMATCH = "SIGNATURE_MISMATCH"


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class DriftWarning(BaseModel):
    """A single drift finding."""

    model_config = ConfigDict(frozen=True)

    type: WarningType
    module: str
    message: str
    severity: Severity
    remediation: str = ""


class Summary(BaseModel):
    total_modules: int = 0
    matching_modules: int = 0
    missing_modules: int = 0
    extra_code_dirs: int = 0
    total_warnings: int = 0
    error_count: int = 0
    warning_count: int = 0  # every non-error warning, info included
    languages: dict[str, int] = {}  # language -> file count
    missing_endpoints: int = 0
    undocumented_endpoints: int = 0
    signature_mismatches: int = 0


class InspectResult(BaseModel):
    """Outcome of one inspection run."""

    success: bool
    warnings: list[DriftWarning] = []
    summary: Summary = Field(default_factory=Summary)
