"""Contract validation: documented API endpoints versus code."""

import logging
import os
import re
from collections.abc import Iterable
from pathlib import Path

import yaml

from driftscan.analyzer import PolyglotAnalyzer
from driftscan.errors import WalkError
from driftscan.models import DriftWarning, Endpoint, Severity, WarningType
from driftscan.parser.architecture import parse_architecture
from driftscan.parser.openapi import parse_openapi

logger = logging.getLogger(__name__)

OPENAPI_FILES = ("openapi.yaml", "openapi.yml")
ARCHITECTURE_FILE = "architecture.md"
FOUNDATION_ARCHITECTURE = "ARCHITECTURE.md"

# :id / <id> / <int:id>
_COLON_PARAM = re.compile(r":(\w+)")
_ANGLE_PARAM = re.compile(r"<(?:[^:>]+:)?([^>]+)>")


def normalize_path(path: str) -> str:
    """Canonical form of a route for comparison.

    ``/users/:id``, ``/users/<id>/``, ``/users/<int:id>`` and ``/users/{id}``
    all normalize to ``/users/{id}``.
    """
    path = path.strip()
    path = _ANGLE_PARAM.sub(r"{\1}", path)
    path = _COLON_PARAM.sub(r"{\1}", path)
    if len(path) > 1 and path.endswith("/"):
        path = path[:-1]
    return "/" + path.lstrip("/")


def endpoint_key(endpoint: Endpoint) -> str:
    return f"{endpoint.method.upper()} {normalize_path(endpoint.path)}"


def load_documented_endpoints(blueprints_path: Path, foundation_path: Path) -> list[Endpoint]:
    """Collect endpoints from blueprint OpenAPI and architecture documents.

    Falls back to ``<foundation>/ARCHITECTURE.md`` when the blueprints
    document nothing.
    """
    openapi_files, architecture_files = _find_documents(Path(blueprints_path))

    documented: list[Endpoint] = []
    for path in openapi_files:
        documented.extend(_parse_document(parse_openapi, path))
    for path in architecture_files:
        documented.extend(_parse_document(parse_architecture, path))

    if not documented:
        fallback = Path(foundation_path) / FOUNDATION_ARCHITECTURE
        if fallback.is_file():
            documented.extend(_parse_document(parse_architecture, fallback))

    logger.info("Found %d documented endpoints", len(documented))
    return documented


def _find_documents(blueprints_path: Path) -> tuple[list[Path], list[Path]]:
    openapi_files: list[Path] = []
    architecture_files: list[Path] = []
    if not blueprints_path.is_dir():
        return openapi_files, architecture_files

    def _raise(error: OSError):
        raise error

    try:
        for dirpath, dirnames, filenames in os.walk(blueprints_path, onerror=_raise):
            dirnames.sort()
            for filename in sorted(filenames):
                if filename in OPENAPI_FILES:
                    openapi_files.append(Path(dirpath) / filename)
                elif filename.lower() == ARCHITECTURE_FILE:
                    architecture_files.append(Path(dirpath) / filename)
    except OSError as e:
        raise WalkError(f"failed to walk blueprints directory {blueprints_path}: {e}") from e
    return openapi_files, architecture_files


def _parse_document(parse, path: Path) -> list[Endpoint]:
    try:
        return parse(path)
    except (OSError, UnicodeDecodeError, ValueError, yaml.YAMLError) as e:
        logger.warning("Skipping unparseable API document %s: %s", path, e)
        return []


def compare_endpoints(documented: Iterable[Endpoint], implemented: Iterable[Endpoint]) -> list[DriftWarning]:
    """Diff documented and implemented endpoints by method and normalized path."""
    documented_by_key: dict[str, Endpoint] = {}
    for endpoint in documented:
        documented_by_key.setdefault(endpoint_key(endpoint), endpoint)
    implemented_by_key: dict[str, Endpoint] = {}
    for endpoint in implemented:
        implemented_by_key.setdefault(endpoint_key(endpoint), endpoint)

    warnings = []
    for key, endpoint in documented_by_key.items():
        if key in implemented_by_key:
            continue
        warnings.append(
            DriftWarning(
                type=WarningType.MISSING_ENDPOINT,
                module="api",
                message=f"API endpoint {endpoint.method} {endpoint.path} is documented but not implemented",
                severity=Severity.ERROR,
                remediation=f"Implement handler for {endpoint.method} {endpoint.path} or remove from API documentation",
            )
        )

    for key, endpoint in implemented_by_key.items():
        if key in documented_by_key:
            continue
        location = f"{os.path.basename(endpoint.file)}:{endpoint.line}"
        warnings.append(
            DriftWarning(
                type=WarningType.UNDOCUMENTED_ENDPOINT,
                module="api",
                message=(
                    f"API endpoint {endpoint.method} {endpoint.path} is implemented but not documented "
                    f"(found in {location})"
                ),
                severity=Severity.WARNING,
                remediation=f"Add {endpoint.method} {endpoint.path} to API documentation (OpenAPI/ARCHITECTURE.md)",
            )
        )

    return warnings


def validate_contracts(
    root: Path,
    blueprints_path: Path,
    foundation_path: Path,
    ignore_dirs: Iterable[str] = (),
    analyzer: PolyglotAnalyzer | None = None,
) -> list[DriftWarning]:
    """Check code endpoints against documented ones; no documentation, no warnings."""
    documented = load_documented_endpoints(blueprints_path, foundation_path)
    if not documented:
        logger.info("No API documentation found, skipping contract validation")
        return []

    analyzer = analyzer or PolyglotAnalyzer.default()
    implemented = analyzer.extract_all_endpoints(root, ignore_dirs)
    return compare_endpoints(documented, implemented)
