"""Language detector interface and shared text helpers.

Detectors are heuristic, line-oriented scanners: they never parse a file
and never raise on content they do not recognize, they just return fewer
results.
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

from driftscan.models import Endpoint, FunctionSignature, Language

_QUOTES = "'\"`"


class LanguageDetector(ABC):
    """Recognizes one language's files and extracts endpoints and functions."""

    language: Language
    extensions: tuple[str, ...] = ()

    def detect(self, file_path: str | Path) -> bool:
        """Return True if this detector handles the file (by extension)."""
        return str(file_path).lower().endswith(self.extensions)

    @abstractmethod
    def extract_endpoints(self, file_path: str, content: str) -> list[Endpoint]:
        """Find HTTP endpoint declarations in the file content."""

    @abstractmethod
    def extract_functions(self, file_path: str, content: str) -> list[FunctionSignature]:
        """Find function and method signatures in the file content."""

    def _endpoint(self, method: str, path: str, handler: str, file_path: str, line: int) -> Endpoint:
        return Endpoint(
            method=method.upper(),
            path=path,
            handler=handler,
            file=file_path,
            line=line,
            language=self.language,
        )


@dataclass(frozen=True)
class PendingRoute:
    methods: tuple[str, ...]
    path: str
    line: int


class RoutePairing:
    """Pairs a route annotation with the declaration that follows it.

    Two states: idle (``pending is None``) and awaiting a declaration.
    An annotation moves to the awaiting state; the next declaration
    consumes the pending route and returns to idle. A pending route that
    never meets a declaration is simply dropped.
    """

    def __init__(self):
        self.pending: PendingRoute | None = None

    @property
    def awaiting(self) -> bool:
        return self.pending is not None

    def annotate(self, methods: tuple[str, ...], path: str | None, line: int) -> None:
        """Record an annotation.

        A method-less annotation (e.g. a bare route template) and a
        path-less one (e.g. ``[HttpGet]``) stacked on the same declaration
        are merged. Otherwise the newer annotation replaces the pending one.
        """
        current = self.pending
        if current is not None and (not current.methods or not methods):
            methods = methods or current.methods
            path = path if path else current.path
        self.pending = PendingRoute(methods=tuple(methods), path=path or "", line=line)

    def consume(self) -> PendingRoute | None:
        pending, self.pending = self.pending, None
        return pending

    def reset(self) -> None:
        self.pending = None


def split_top_level(text: str, sep: str = ",", brackets: str = "()[]{}") -> list[str]:
    """Split ``text`` on ``sep`` where it is not nested in brackets or quotes.

    ``brackets`` lists open/close pairs, e.g. ``"()[]{}<>"``. A ``>`` that
    is part of ``=>`` or ``->`` never closes a bracket, and when splitting
    on ``=`` the operators ``==``, ``=>``, ``<=``, ``>=`` and ``!=`` are
    left alone.
    """
    opens = brackets[0::2]
    closes = brackets[1::2]
    parts: list[str] = []
    current: list[str] = []
    depth = 0
    quote = ""

    for i, ch in enumerate(text):
        prev = text[i - 1] if i else ""
        if quote:
            current.append(ch)
            if ch == quote and prev != "\\":
                quote = ""
            continue
        if ch in _QUOTES:
            quote = ch
        elif ch in opens:
            depth += 1
        elif ch in closes and not (ch == ">" and prev in "=-"):
            depth = max(depth - 1, 0)
        elif ch == sep and depth == 0:
            nxt = text[i + 1 : i + 2]
            if sep != "=" or (nxt not in ("=", ">") and prev not in ("=", "!", "<", ">")):
                parts.append("".join(current))
                current = []
                continue
        current.append(ch)

    parts.append("".join(current))
    return parts


def split_params(text: str, brackets: str = "()[]{}") -> list[str]:
    """Split a parameter list on top-level commas, dropping empty parts."""
    if not text.strip():
        return []
    return [part.strip() for part in split_top_level(text, ",", brackets) if part.strip()]


def strip_default(part: str) -> str:
    """Drop a ``= default`` suffix from a parameter declaration."""
    return split_top_level(part, "=", "()[]{}<>")[0].strip()


_HANDLER = re.compile(r"^([A-Za-z_$][\w$.:]*)\s*\)*\s*[;,]?\s*$")


def handler_name(args_text: str) -> str:
    """Best-effort handler symbol from the arguments following a route path.

    Returns the last argument that is a plain (possibly dotted) name, so
    middleware before the handler is skipped. Inline functions yield "".
    """
    for arg in reversed(split_params(args_text)):
        match = _HANDLER.match(arg)
        if match:
            return match.group(1)
    return ""


def join_route(prefix: str, path: str) -> str:
    """Join a class/controller-level route prefix and a method route."""
    if not prefix:
        return path
    if not path:
        return prefix
    return prefix.rstrip("/") + "/" + path.lstrip("/")


def find_closing(text: str, start: int, open_ch: str = "(", close_ch: str = ")") -> int:
    """Index of the bracket closing the one at ``text[start]``, or -1."""
    depth = 0
    for i in range(start, len(text)):
        if text[i] == open_ch:
            depth += 1
        elif text[i] == close_ch:
            depth -= 1
            if depth == 0:
                return i
    return -1
