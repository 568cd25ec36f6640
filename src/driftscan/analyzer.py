"""Polyglot analyzer: walks a project tree and dispatches files to detectors."""

import logging
import os
from collections.abc import Iterable, Iterator
from pathlib import Path

from driftscan.detectors.base import LanguageDetector
from driftscan.detectors.csharp import CSharpDetector
from driftscan.detectors.go import GoDetector
from driftscan.detectors.java import JavaDetector
from driftscan.detectors.javascript import JavaScriptDetector
from driftscan.detectors.python import PythonDetector
from driftscan.detectors.ruby import RubyDetector
from driftscan.errors import WalkError
from driftscan.models import Endpoint, FunctionSignature, Language

logger = logging.getLogger(__name__)

DEFAULT_DETECTORS = (
    GoDetector,
    PythonDetector,
    JavaScriptDetector,
    JavaDetector,
    CSharpDetector,
    RubyDetector,
)


class PolyglotAnalyzer:
    """Registry of language detectors, first match wins per file."""

    def __init__(self, detectors: Iterable[LanguageDetector] | None = None):
        self.detectors: list[LanguageDetector] = list(detectors or [])

    @classmethod
    def default(cls) -> "PolyglotAnalyzer":
        return cls(detector() for detector in DEFAULT_DETECTORS)

    def register(self, detector: LanguageDetector) -> None:
        self.detectors.append(detector)

    def detector_for(self, file_path: str | Path) -> LanguageDetector | None:
        for detector in self.detectors:
            if detector.detect(file_path):
                return detector
        return None

    def detect_languages(self, root: str | Path, ignore_dirs: Iterable[str] = ()) -> dict[str, int]:
        """Count source files per language under ``root``."""
        counts: dict[str, int] = {}
        for path in walk_files(root, ignore_dirs):
            detector = self.detector_for(path)
            if detector:
                counts[detector.language.value] = counts.get(detector.language.value, 0) + 1
        return counts

    def extract_all_endpoints(self, root: str | Path, ignore_dirs: Iterable[str] = ()) -> list[Endpoint]:
        endpoints: list[Endpoint] = []
        for detector, path, content in self._sources(root, ignore_dirs):
            try:
                endpoints.extend(detector.extract_endpoints(str(path), content))
            except Exception as e:
                logger.debug("Skipping endpoints in %s: %s", path, e)
        logger.info("Found %d endpoints in code", len(endpoints))
        return endpoints

    def extract_all_functions(self, root: str | Path, ignore_dirs: Iterable[str] = ()) -> list[FunctionSignature]:
        functions: list[FunctionSignature] = []
        for detector, path, content in self._sources(root, ignore_dirs):
            try:
                functions.extend(detector.extract_functions(str(path), content))
            except Exception as e:
                logger.debug("Skipping functions in %s: %s", path, e)
        logger.info("Found %d functions in code", len(functions))
        return functions

    def _sources(self, root, ignore_dirs) -> Iterator[tuple[LanguageDetector, Path, str]]:
        for path in walk_files(root, ignore_dirs):
            detector = self.detector_for(path)
            if detector is None:
                continue
            try:
                content = path.read_text(encoding="utf-8", errors="replace")
            except OSError as e:
                logger.debug("Skipping unreadable file %s: %s", path, e)
                continue
            yield detector, path, content


def walk_files(root: str | Path, ignore_dirs: Iterable[str] = ()) -> Iterator[Path]:
    """Yield every file under ``root`` in sorted order.

    Directories named in ``ignore_dirs`` or starting with ``.`` are pruned;
    the root itself is always walked.
    """
    root = Path(root)
    if not root.is_dir():
        raise WalkError(f"cannot walk {root}: not a directory")

    ignored = frozenset(ignore_dirs)

    def _raise(error: OSError):
        raise error

    try:
        for dirpath, dirnames, filenames in os.walk(root, onerror=_raise):
            dirnames[:] = sorted(d for d in dirnames if d not in ignored and not d.startswith("."))
            for filename in sorted(filenames):
                yield Path(dirpath) / filename
    except OSError as e:
        raise WalkError(f"failed to walk {root}: {e}") from e


_default_analyzer: PolyglotAnalyzer | None = None


def language_for_path(file_path: str | Path) -> Language | None:
    """Language of a file according to the default detector registry."""
    global _default_analyzer
    if _default_analyzer is None:
        _default_analyzer = PolyglotAnalyzer.default()
    detector = _default_analyzer.detector_for(file_path)
    return detector.language if detector else None
