import pytest

from driftscan.errors import DescriptorError, WalkError
from driftscan.models import Severity, WarningType
from driftscan.modules import (
    check_module_files,
    code_modules,
    foundation_modules,
    load_descriptor,
    reconcile_modules,
)


@pytest.fixture
def foundation(tmp_path):
    path = tmp_path / ".driftscan" / "foundation"
    path.mkdir(parents=True)
    return path


class TestFoundationModules:
    def test_lists_markdown_specs(self, foundation):
        (foundation / "auth.md").write_text("# auth")
        (foundation / "billing.md").write_text("# billing")
        (foundation / "auth.module.yaml").write_text("name: auth")
        (foundation / "archive").mkdir()
        (foundation / "archive" / "old.md").write_text("# old")
        assert foundation_modules(foundation) == ["auth", "billing"]

    def test_missing_directory(self, tmp_path):
        assert foundation_modules(tmp_path / "nope") == []


class TestCodeModules:
    def test_prefers_src(self, tmp_path):
        (tmp_path / "src" / "auth").mkdir(parents=True)
        (tmp_path / "docs").mkdir()
        assert list(code_modules(tmp_path)) == ["auth"]

    def test_root_when_no_src(self, tmp_path):
        for name in ("auth", "node_modules", ".git"):
            (tmp_path / name).mkdir()
        (tmp_path / "main.go").write_text("package main")
        assert list(code_modules(tmp_path, {"node_modules"})) == ["auth"]

    def test_missing_root_raises(self, tmp_path):
        with pytest.raises(WalkError):
            code_modules(tmp_path / "nope")


class TestLoadDescriptor:
    def test_absent_descriptor(self, foundation):
        assert load_descriptor(foundation, "auth") is None

    def test_loads_descriptor(self, foundation):
        (foundation / "auth.module.yaml").write_text(
            "expected_files:\n  - handler.go\nexpected_functions:\n  - name: Login\n    language: go\n"
        )
        descriptor = load_descriptor(foundation, "auth")
        assert descriptor.name == "auth"
        assert descriptor.expected_files == ["handler.go"]
        assert descriptor.expected_functions[0].language == "go"

    def test_malformed_yaml_raises(self, foundation):
        (foundation / "auth.module.yaml").write_text("expected_files: [unclosed\n")
        with pytest.raises(DescriptorError) as exc_info:
            load_descriptor(foundation, "auth")
        assert exc_info.value.__cause__ is not None

    def test_wrong_shape_raises(self, foundation):
        (foundation / "auth.module.yaml").write_text("expected_files: 42\n")
        with pytest.raises(DescriptorError):
            load_descriptor(foundation, "auth")

    def test_empty_descriptor(self, foundation):
        (foundation / "auth.module.yaml").write_text("")
        descriptor = load_descriptor(foundation, "auth")
        assert descriptor.expected_files == []


class TestCheckModuleFiles:
    def test_reports_missing_files_dirs_and_patterns(self, tmp_path, foundation):
        module = tmp_path / "src" / "auth"
        (module / "handlers").mkdir(parents=True)
        (module / "handler.go").write_text("package auth")
        (module / "models").write_text("not a directory")
        (foundation / "auth.module.yaml").write_text(
            "expected_files: [handler.go, service.go]\n"
            "expected_dirs: [handlers, models]\n"
            "patterns: ['**/*.go', '*_test.go']\n"
        )
        warnings = check_module_files("auth", load_descriptor(foundation, "auth"), module)

        assert [(w.type, w.severity) for w in warnings] == [
            (WarningType.MISSING_FILE, Severity.WARNING),
            (WarningType.MISSING_FILE, Severity.WARNING),
            (WarningType.MISSING_FILE, Severity.INFO),
        ]
        assert "service.go" in warnings[0].message
        assert "models" in warnings[1].message
        assert "*_test.go" in warnings[2].message


class TestReconcileModules:
    def test_scenario_missing_and_extra(self, tmp_path, foundation):
        (foundation / "auth.md").write_text("# auth")
        (foundation / "billing.md").write_text("# billing")
        (tmp_path / "src" / "auth").mkdir(parents=True)
        (tmp_path / "src" / "legacy").mkdir()

        result = reconcile_modules(tmp_path, foundation)

        assert (result.total, result.matching, result.missing, result.extra) == (2, 1, 1, 1)
        assert result.total == result.matching + result.missing
        by_type = {w.type: w for w in result.warnings}
        assert by_type[WarningType.MISSING_MODULE].module == "billing"
        assert by_type[WarningType.MISSING_MODULE].severity is Severity.WARNING
        assert by_type[WarningType.EXTRA_CODE].module == "legacy"
        assert by_type[WarningType.EXTRA_CODE].severity is Severity.INFO

    def test_descriptors_only_checked_when_enabled(self, tmp_path, foundation):
        (foundation / "auth.md").write_text("# auth")
        (foundation / "auth.module.yaml").write_text("expected_files: [missing.go]\n")
        (tmp_path / "src" / "auth").mkdir(parents=True)

        assert reconcile_modules(tmp_path, foundation).warnings == []
        warnings = reconcile_modules(tmp_path, foundation, use_descriptors=True).warnings
        assert [w.type for w in warnings] == [WarningType.MISSING_FILE]

    def test_malformed_descriptor_propagates(self, tmp_path, foundation):
        (foundation / "auth.md").write_text("# auth")
        (foundation / "auth.module.yaml").write_text("- just\n- a list\n")
        (tmp_path / "src" / "auth").mkdir(parents=True)
        with pytest.raises(DescriptorError):
            reconcile_modules(tmp_path, foundation, use_descriptors=True)
