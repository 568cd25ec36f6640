"""Exceptions raised for hard failures during an inspection.

Drift findings are never exceptions; they are reported as DriftWarning
values. These errors abort the run and carry a hint for the user.
"""


class DriftscanError(Exception):
    """Base class for all driftscan failures."""

    hint = "An unexpected error occurred. Re-run with --verbose for more details."


class WalkError(DriftscanError):
    """A directory tree could not be walked."""

    hint = "Check that the project directory exists and is readable."


class FoundationError(DriftscanError):
    """The foundation directory could not be read."""

    hint = "Check that the foundation directory is readable, or run `driftscan inspect` from the project root."


class DescriptorError(DriftscanError):
    """A module descriptor (<module>.module.yaml) is malformed."""

    hint = "Fix the YAML syntax or field types in the module descriptor."


class ConfigError(DriftscanError):
    """driftscan.yaml is malformed or invalid."""

    hint = "Your driftscan.yaml configuration is invalid. Check the format and try again."
