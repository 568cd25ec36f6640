"""Inspection entry point: runs every drift check and summarizes the result."""

import logging
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from driftscan.analyzer import PolyglotAnalyzer
from driftscan.config import BLUEPRINTS_DIR, DEFAULT_IGNORE_DIRS, SPEC_DIR
from driftscan.contracts import validate_contracts
from driftscan.models import InspectResult, Severity, Summary, WarningType
from driftscan.modules import reconcile_modules
from driftscan.signatures import validate_signatures

logger = logging.getLogger(__name__)


class InspectOptions(BaseModel):
    root_dir: Path
    foundation_path: Path
    blueprints_path: Path | None = None  # defaults to <root>/.driftscan/blueprints
    ignore_dirs: list[str] = Field(default_factory=lambda: list(DEFAULT_IGNORE_DIRS))
    use_descriptors: bool = False
    depth: int = 1  # 1=structure, 2=+API contracts, 3=+signatures
    check_api: bool = False
    check_signatures: bool = False

    @field_validator("depth")
    @classmethod
    def _depth_range(cls, value: int) -> int:
        if not 1 <= value <= 3:
            raise ValueError(f"depth must be 1, 2 or 3, got {value}")
        return value

    def resolved_blueprints_path(self) -> Path:
        return self.blueprints_path or self.root_dir / SPEC_DIR / BLUEPRINTS_DIR


def inspect(options: InspectOptions, analyzer: PolyglotAnalyzer | None = None) -> InspectResult:
    """Compare foundation specs and API documentation with the code under ``options.root_dir``.

    Raises a DriftscanError subclass on hard failures (unreadable root,
    foundation or blueprints, malformed descriptor). Drift itself is
    reported through the returned warnings.
    """
    analyzer = analyzer or PolyglotAnalyzer.default()
    root = options.root_dir
    ignore = frozenset(options.ignore_dirs)
    summary = Summary()

    logger.info("Inspecting %s", root)
    summary.languages = analyzer.detect_languages(root, ignore)

    reconciliation = reconcile_modules(root, options.foundation_path, ignore, options.use_descriptors)
    summary.total_modules = reconciliation.total
    summary.matching_modules = reconciliation.matching
    summary.missing_modules = reconciliation.missing
    summary.extra_code_dirs = reconciliation.extra
    warnings = list(reconciliation.warnings)

    if options.check_api or options.depth >= 2:
        logger.info("Validating API contracts")
        api_warnings = validate_contracts(
            root, options.resolved_blueprints_path(), options.foundation_path, ignore, analyzer
        )
        summary.missing_endpoints = sum(w.type == WarningType.MISSING_ENDPOINT for w in api_warnings)
        summary.undocumented_endpoints = sum(w.type == WarningType.UNDOCUMENTED_ENDPOINT for w in api_warnings)
        warnings.extend(api_warnings)

    if options.check_signatures or options.depth >= 3:
        logger.info("Validating function signatures")
        signature_warnings = validate_signatures(root, options.foundation_path, ignore, analyzer)
        summary.signature_mismatches = sum(w.type == WarningType.SIGNATURE_MISMATCH for w in signature_warnings)
        warnings.extend(signature_warnings)

    summary.total_warnings = len(warnings)
    summary.error_count = sum(w.severity == Severity.ERROR for w in warnings)
    summary.warning_count = summary.total_warnings - summary.error_count

    return InspectResult(success=summary.error_count == 0, warnings=warnings, summary=summary)
