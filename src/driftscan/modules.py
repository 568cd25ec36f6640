"""Module reconciliation: foundation specs versus code directories."""

import glob
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

import yaml
from pydantic import ValidationError

from driftscan.errors import DescriptorError, FoundationError, WalkError
from driftscan.models import DriftWarning, ModuleDescriptor, Severity, WarningType

logger = logging.getLogger(__name__)

DESCRIPTOR_SUFFIX = ".module.yaml"


@dataclass
class ModuleReconciliation:
    total: int = 0
    matching: int = 0
    missing: int = 0
    extra: int = 0
    warnings: list[DriftWarning] = field(default_factory=list)


def foundation_modules(foundation_path: Path) -> list[str]:
    """Module names declared by ``*.md`` files directly in the foundation directory."""
    foundation_path = Path(foundation_path)
    if not foundation_path.exists():
        return []
    try:
        entries = list(foundation_path.iterdir())
    except OSError as e:
        raise FoundationError(f"failed to read foundation directory {foundation_path}: {e}") from e
    return sorted(entry.stem for entry in entries if entry.is_file() and entry.suffix == ".md")


def code_modules(root: Path, ignore_dirs: Iterable[str] = ()) -> dict[str, Path]:
    """Top-level code directories, taken from ``<root>/src`` when it exists."""
    root = Path(root)
    base = root / "src" if (root / "src").is_dir() else root
    ignored = frozenset(ignore_dirs)
    try:
        entries = sorted(base.iterdir())
    except OSError as e:
        raise WalkError(f"failed to list code directories in {base}: {e}") from e
    return {
        entry.name: entry
        for entry in entries
        if entry.is_dir() and not entry.name.startswith(".") and entry.name not in ignored
    }


def load_descriptor(foundation_path: Path, module: str) -> ModuleDescriptor | None:
    """Load ``<module>.module.yaml`` beside the foundation specs, if present."""
    path = Path(foundation_path) / f"{module}{DESCRIPTOR_SUFFIX}"
    if not path.exists():
        return None
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise DescriptorError(f"failed to read module descriptor {path.name}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise DescriptorError(f"module descriptor {path.name} must contain a mapping")
    try:
        descriptor = ModuleDescriptor(**data)
    except ValidationError as e:
        raise DescriptorError(f"invalid module descriptor {path.name}: {e}") from e
    if not descriptor.name:
        descriptor.name = module
    return descriptor


def check_module_files(module: str, descriptor: ModuleDescriptor, module_path: Path) -> list[DriftWarning]:
    """Check that a module's expected files, directories and patterns exist."""
    module_path = Path(module_path)
    warnings = []

    for expected in descriptor.expected_files:
        if not (module_path / expected).exists():
            warnings.append(
                DriftWarning(
                    type=WarningType.MISSING_FILE,
                    module=module,
                    message=f"Expected file '{expected}' not found in module '{module}'",
                    severity=Severity.WARNING,
                    remediation=f"Create file '{module_path / expected}' or update module descriptor",
                )
            )

    for expected in descriptor.expected_dirs:
        if not (module_path / expected).is_dir():
            warnings.append(
                DriftWarning(
                    type=WarningType.MISSING_FILE,
                    module=module,
                    message=f"Expected directory '{expected}' not found in module '{module}'",
                    severity=Severity.WARNING,
                    remediation=f"Create directory '{module_path / expected}' or update module descriptor",
                )
            )

    for pattern in descriptor.patterns:
        if not glob.glob(pattern, root_dir=module_path, recursive=True):
            warnings.append(
                DriftWarning(
                    type=WarningType.MISSING_FILE,
                    module=module,
                    message=f"No files matching pattern '{pattern}' in module '{module}'",
                    severity=Severity.INFO,
                    remediation=f"Add files matching pattern '{pattern}' or update module descriptor",
                )
            )

    return warnings


def reconcile_modules(
    root: Path,
    foundation_path: Path,
    ignore_dirs: Iterable[str] = (),
    use_descriptors: bool = False,
) -> ModuleReconciliation:
    """Compare foundation modules with top-level code directories."""
    declared = foundation_modules(foundation_path)
    present = code_modules(root, ignore_dirs)
    result = ModuleReconciliation(total=len(declared))

    for module in declared:
        module_path = present.get(module)
        if module_path is None:
            result.missing += 1
            result.warnings.append(
                DriftWarning(
                    type=WarningType.MISSING_MODULE,
                    module=module,
                    message=f"Foundation spec '{module}.md' exists but directory '{module}/' not found in code",
                    severity=Severity.WARNING,
                    remediation=f"Create directory '{module}/' or remove the foundation spec",
                )
            )
            continue

        result.matching += 1
        if use_descriptors:
            descriptor = load_descriptor(foundation_path, module)
            if descriptor is not None:
                result.warnings.extend(check_module_files(module, descriptor, module_path))

    declared_set = set(declared)
    for module in present:
        if module in declared_set:
            continue
        result.extra += 1
        result.warnings.append(
            DriftWarning(
                type=WarningType.EXTRA_CODE,
                module=module,
                message=f"Code directory '{module}/' exists but no foundation spec '{module}.md' found",
                severity=Severity.INFO,
                remediation=f"Create foundation spec '{module}.md' or remove the directory",
            )
        )

    logger.info(
        "Reconciled %d foundation modules: %d matching, %d missing, %d extra",
        result.total,
        result.matching,
        result.missing,
        result.extra,
    )
    return result
