"""Human-readable rendering of an InspectResult."""

import click

from driftscan.models import DriftWarning, InspectResult, Severity

_SECTIONS = (
    (Severity.ERROR, "Errors:", "red"),
    (Severity.WARNING, "Warnings:", "yellow"),
    (Severity.INFO, "Info:", "cyan"),
)


def _languages_line(languages: dict[str, int]) -> str:
    return " | ".join(f"{lang} ({count} files)" for lang, count in sorted(languages.items()))


def _warning_lines(warning: DriftWarning) -> list[str]:
    lines = [f"  [{warning.type.value}] {warning.module}: {warning.message}"]
    if warning.remediation and warning.severity != Severity.INFO:
        lines.append(f"    -> {warning.remediation}")
    return lines


def render_result(result: InspectResult) -> str:
    summary = result.summary
    lines = []

    if result.success and not result.warnings:
        lines.append(click.style("Foundation is solid.", fg="green", bold=True))
        if summary.languages:
            lines.append("")
            lines.append(f"Languages detected: {_languages_line(summary.languages)}")
        lines.append("")
        lines.append(f"Summary: {summary.total_modules} modules checked, all in sync")
        return "\n".join(lines)

    lines.append(click.style("Foundation drift detected:", fg="yellow", bold=True))
    lines.append("")
    if summary.languages:
        lines.append(f"Languages detected: {_languages_line(summary.languages)}")
        lines.append("")

    for severity, title, colour in _SECTIONS:
        group = [w for w in result.warnings if w.severity == severity]
        if not group:
            continue
        lines.append(click.style(title, fg=colour, bold=True))
        for warning in group:
            lines.extend(_warning_lines(warning))
        lines.append("")

    lines.append("Summary:")
    lines.append(f"  Total modules: {summary.total_modules}")
    lines.append(f"  Matching: {summary.matching_modules}")
    lines.append(f"  Missing: {summary.missing_modules}")
    lines.append(f"  Extra code dirs: {summary.extra_code_dirs}")
    if summary.missing_endpoints or summary.undocumented_endpoints:
        lines.append(f"  Missing endpoints: {summary.missing_endpoints}")
        lines.append(f"  Undocumented endpoints: {summary.undocumented_endpoints}")
    if summary.signature_mismatches:
        lines.append(f"  Signature mismatches: {summary.signature_mismatches}")
    lines.append(
        f"  Total warnings: {summary.total_warnings} "
        f"(errors: {summary.error_count}, warnings: {summary.warning_count})"
    )
    return "\n".join(lines)
