"""Signature validation: descriptor-declared functions versus extracted ones."""

import fnmatch
import logging
import os
import re
from collections.abc import Iterable
from pathlib import Path

from driftscan.analyzer import PolyglotAnalyzer, language_for_path
from driftscan.models import DriftWarning, FunctionSignature, FunctionSpec, Language, Severity, WarningType
from driftscan.modules import foundation_modules, load_descriptor

logger = logging.getLogger(__name__)

_QUALIFIER = re.compile(r"\b(?:\w+\.)+(?=\w)")


def normalize_type(type_name: str) -> str:
    """Strip whitespace and package qualifiers: ``http.Request`` -> ``Request``."""
    return _QUALIFIER.sub("", type_name.strip())


def types_match(expected: str, actual: str) -> bool:
    """Loose type equality: case-insensitive, qualifier and pointer tolerant."""
    a = normalize_type(expected).lower()
    b = normalize_type(actual).lower()
    return a.removeprefix("*") == b.removeprefix("*")


def format_expected_signature(spec: FunctionSpec) -> str:
    """Render a FunctionSpec as ``[visibility] name(p type, ...) -> (ret, ...)``."""
    head = f"{spec.visibility.value} {spec.name}" if spec.visibility else spec.name
    params = ", ".join(f"{p.name} {p.type}" if p.name else p.type for p in spec.parameters)
    signature = f"{head}({params})"
    if spec.returns:
        signature += " -> (" + ", ".join(r.type for r in spec.returns) + ")"
    return signature


def compare_signatures(module: str, expected: FunctionSpec, actual: FunctionSignature) -> list[DriftWarning]:
    """Field-by-field differences between an expected and an extracted signature."""
    warnings = []
    where = f"in {os.path.basename(actual.file)}:{actual.line}"

    def mismatch(message: str, severity: Severity, remediation: str):
        warnings.append(
            DriftWarning(
                type=WarningType.SIGNATURE_MISMATCH,
                module=module,
                message=f"{message} ({where})",
                severity=severity,
                remediation=remediation,
            )
        )

    if len(expected.parameters) != len(actual.parameters):
        mismatch(
            f"Function '{expected.name}' has {len(actual.parameters)} parameters but expected {len(expected.parameters)}",
            Severity.WARNING,
            f"Update function signature to match spec: {format_expected_signature(expected)}",
        )
    else:
        for i, (want, got) in enumerate(zip(expected.parameters, actual.parameters)):
            if want.name and want.name != got.name:
                mismatch(
                    f"Function '{expected.name}' parameter {i + 1}: name '{got.name}' doesn't match expected '{want.name}'",
                    Severity.INFO,
                    f"Consider renaming parameter to '{want.name}' for consistency",
                )
            if want.type and not types_match(want.type, got.type):
                mismatch(
                    f"Function '{expected.name}' parameter '{got.name}': type '{got.type}' doesn't match expected '{want.type}'",
                    Severity.WARNING,
                    f"Update parameter type to '{want.type}'",
                )

    if len(expected.returns) != len(actual.returns):
        mismatch(
            f"Function '{expected.name}' has {len(actual.returns)} return values but expected {len(expected.returns)}",
            Severity.WARNING,
            f"Update return types to match spec: {format_expected_signature(expected)}",
        )
    else:
        for i, (want, got) in enumerate(zip(expected.returns, actual.returns)):
            if want.type and not types_match(want.type, got.type):
                mismatch(
                    f"Function '{expected.name}' return type {i + 1}: '{got.type}' doesn't match expected '{want.type}'",
                    Severity.WARNING,
                    f"Update return type to '{want.type}'",
                )

    if expected.visibility and expected.visibility != actual.visibility:
        mismatch(
            f"Function '{expected.name}' has visibility '{actual.visibility.value}' but expected '{expected.visibility.value}'",
            Severity.INFO,
            f"Change visibility to '{expected.visibility.value}' if intended for external use",
        )

    return warnings


def _candidates(spec: FunctionSpec, functions: list[FunctionSignature]) -> list[FunctionSignature]:
    if spec.language:
        wanted = Language.from_name(spec.language)
        functions = [f for f in functions if wanted is not None and language_for_path(f.file) == wanted]
    if spec.file_pattern:
        functions = [f for f in functions if fnmatch.fnmatchcase(os.path.basename(f.file), spec.file_pattern)]
    return functions


def _filter_description(spec: FunctionSpec) -> str:
    parts = []
    if spec.language:
        parts.append(f"{spec.language} files")
    if spec.file_pattern:
        parts.append(f"files matching '{spec.file_pattern}'")
    return " and ".join(parts)


def check_function(module: str, spec: FunctionSpec, by_name: dict[str, list[FunctionSignature]]) -> list[DriftWarning]:
    """Validate one expected function against the name index."""
    language_hint = spec.language or "source"
    found = by_name.get(spec.name)
    if not found:
        return [
            DriftWarning(
                type=WarningType.MISSING_FUNCTION,
                module=module,
                message=f"Expected function '{spec.name}' not found in code",
                severity=Severity.ERROR,
                remediation=f"Implement function '{spec.name}' in {language_hint} files or update module descriptor",
            )
        ]

    candidates = _candidates(spec, found)
    if not candidates:
        return [
            DriftWarning(
                type=WarningType.MISSING_FUNCTION,
                module=module,
                message=f"Expected function '{spec.name}' not found in {_filter_description(spec)}",
                severity=Severity.ERROR,
                remediation=f"Implement function '{spec.name}' in {language_hint} files or update module descriptor",
            )
        ]

    first_diff = None
    for candidate in candidates:
        diff = compare_signatures(module, spec, candidate)
        if not diff:
            return []
        if first_diff is None:
            first_diff = diff
    return first_diff


def validate_signatures(
    root: Path,
    foundation_path: Path,
    ignore_dirs: Iterable[str] = (),
    analyzer: PolyglotAnalyzer | None = None,
) -> list[DriftWarning]:
    """Check every descriptor's expected functions against the code."""
    expectations: list[tuple[str, FunctionSpec]] = []
    for module in foundation_modules(foundation_path):
        descriptor = load_descriptor(foundation_path, module)
        if descriptor is None:
            continue
        expectations.extend((module, spec) for spec in descriptor.expected_functions)

    if not expectations:
        logger.info("No expected functions declared, skipping signature validation")
        return []

    analyzer = analyzer or PolyglotAnalyzer.default()
    by_name: dict[str, list[FunctionSignature]] = {}
    for function in analyzer.extract_all_functions(root, ignore_dirs):
        by_name.setdefault(function.name, []).append(function)

    warnings = []
    for module, spec in expectations:
        warnings.extend(check_function(module, spec, by_name))
    return warnings
