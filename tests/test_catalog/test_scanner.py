"""Tests for the plugin package scanner."""

import json
import logging
import sys

import pytest

from conftest import BROKEN_MODULE, SLACK_MODULE, WEBHOOK_MODULE, write_plugin_package

from n8n_mcp.catalog.node_types import SimpleNode, VersionedNode
from n8n_mcp.catalog.scanner import (
    load_module,
    locate_manifest,
    node_name_from_path,
    read_node_list,
    resolve_node_class,
    scan_packages,
    temporary_syspath,
)
from n8n_mcp.core.exceptions import ModuleLoadError
from n8n_mcp.core.settings import PluginPackage

BASE = PluginPackage(name="n8n-nodes-base", path="n8n-nodes-base")
LANGCHAIN = PluginPackage(name="@n8n/n8n-nodes-langchain", path="@n8n/n8n-nodes-langchain")


class TestNodeNameFromPath:
    """Test node name derivation from manifest entries."""

    def test_node_file(self):
        assert node_name_from_path("dist/nodes/Slack/Slack.node.py") == "Slack"

    def test_nested_node_file(self):
        assert node_name_from_path("dist/nodes/Google/Sheet/GoogleSheets.node.py") == "GoogleSheets"

    def test_plain_module_without_directory(self):
        assert node_name_from_path("Code.py") == "Code"


class TestManifest:
    """Test package manifest lookup and parsing."""

    def test_locate_first_search_path_wins(self, tmp_path):
        first = tmp_path / "a"
        second = tmp_path / "b"
        write_plugin_package(first, "n8n-nodes-base", {})
        write_plugin_package(second, "n8n-nodes-base", {})

        assert locate_manifest(BASE, [first, second]) == first / "n8n-nodes-base" / "package.json"

    def test_locate_missing_returns_none(self, tmp_path):
        assert locate_manifest(BASE, [tmp_path]) is None

    def test_read_node_list(self, tmp_path):
        manifest = tmp_path / "package.json"
        manifest.write_text(json.dumps({"n8n": {"nodes": ["dist/nodes/A/A.node.py"]}}))

        assert read_node_list(manifest) == ["dist/nodes/A/A.node.py"]

    def test_read_node_list_without_n8n_section(self, tmp_path):
        manifest = tmp_path / "package.json"
        manifest.write_text(json.dumps({"name": "plain-package"}))

        assert read_node_list(manifest) == []


class TestLoadModule:
    """Test loading modules from files."""

    def test_loads_and_registers_module(self, tmp_path):
        (tmp_path / "thing.py").write_text("VALUE = 42\n")

        module = load_module(tmp_path, "thing.py", "n8n_mcp_plugins.test_thing")

        assert module.VALUE == 42
        assert sys.modules["n8n_mcp_plugins.test_thing"] is module
        del sys.modules["n8n_mcp_plugins.test_thing"]

    def test_failed_module_is_not_registered(self, tmp_path):
        (tmp_path / "bad.py").write_text("raise ValueError('nope')\n")

        try:
            load_module(tmp_path, "bad.py", "n8n_mcp_plugins.test_bad")
        except ValueError:
            pass

        assert "n8n_mcp_plugins.test_bad" not in sys.modules


class TestResolveNodeClass:
    """Test picking the node definition out of a module."""

    def test_prefers_default_export(self, tmp_path):
        (tmp_path / "mod.py").write_text("class Other: pass\nclass Slack: pass\ndefault = Other\n")
        module = load_module(tmp_path, "mod.py", "n8n_mcp_plugins.test_default")

        assert resolve_node_class(module, "Slack").__name__ == "Other"

    def test_attribute_named_like_node(self, tmp_path):
        (tmp_path / "mod.py").write_text("class Helper: pass\nclass Slack: pass\n")
        module = load_module(tmp_path, "mod.py", "n8n_mcp_plugins.test_named")

        assert resolve_node_class(module, "Slack").__name__ == "Slack"

    def test_first_class_defined_in_module(self, tmp_path):
        (tmp_path / "mod.py").write_text("from pathlib import Path\nclass Renamed: pass\n")
        module = load_module(tmp_path, "mod.py", "n8n_mcp_plugins.test_first")

        assert resolve_node_class(module, "Slack").__name__ == "Renamed"

    def test_no_class_returns_none(self, tmp_path):
        (tmp_path / "mod.py").write_text("VALUE = 1\n")
        module = load_module(tmp_path, "mod.py", "n8n_mcp_plugins.test_empty")

        assert resolve_node_class(module, "Slack") is None


class TestScanPackages:
    """Test scanning whole plugin packages."""

    def test_failing_module_does_not_stop_scan(self, tmp_path):
        root = tmp_path / "node_modules"
        write_plugin_package(
            root,
            "n8n-nodes-base",
            {"Slack": SLACK_MODULE, "Broken": BROKEN_MODULE, "Webhook": WEBHOOK_MODULE},
        )

        result = scan_packages([BASE], [root])

        assert [n.node_name for n in result.nodes] == ["Slack", "Webhook"]
        assert len(result.failures) == 1
        failure = result.failures[0]
        assert isinstance(failure, ModuleLoadError)
        assert failure.module_path == "dist/nodes/Broken/Broken.node.py"
        assert "plugin exploded on import" in str(failure)

    def test_loaded_nodes_carry_package_and_class(self, plugin_root):
        result = scan_packages([BASE, LANGCHAIN], [plugin_root])

        by_name = {n.node_name: n for n in result.nodes}
        assert set(by_name) == {"Slack", "Webhook", "HttpRequest", "Agent"}
        assert by_name["Agent"].package_name == "@n8n/n8n-nodes-langchain"
        assert issubclass(by_name["Slack"].node_class, SimpleNode)
        assert issubclass(by_name["HttpRequest"].node_class, VersionedNode)

    def test_missing_package_is_skipped(self, plugin_root, caplog):
        missing = PluginPackage(name="n8n-nodes-extra", path="n8n-nodes-extra")

        with caplog.at_level(logging.WARNING):
            result = scan_packages([missing, BASE], [plugin_root])

        assert result.skipped_packages == ["n8n-nodes-extra"]
        assert len(result.nodes) == 3
        assert "Package manifest not found for n8n-nodes-extra" in caplog.text

    def test_malformed_manifest_is_skipped(self, tmp_path):
        package_dir = tmp_path / "n8n-nodes-base"
        package_dir.mkdir()
        (package_dir / "package.json").write_text("{not json")

        result = scan_packages([BASE], [tmp_path])

        assert result.nodes == []
        assert result.skipped_packages == ["n8n-nodes-base"]

    @pytest.mark.parametrize("manifest", [[], {"n8n": "not-an-object"}, "just a string"])
    def test_wrong_shaped_manifest_is_skipped(self, tmp_path, plugin_root, manifest):
        package_dir = tmp_path / "n8n-nodes-odd"
        package_dir.mkdir()
        (package_dir / "package.json").write_text(json.dumps(manifest))
        odd = PluginPackage(name="n8n-nodes-odd", path="n8n-nodes-odd")

        result = scan_packages([odd, BASE], [tmp_path, plugin_root])

        assert result.skipped_packages == ["n8n-nodes-odd"]
        assert len(result.nodes) == 3

    def test_module_calling_sys_exit_does_not_stop_scan(self, tmp_path):
        root = tmp_path / "node_modules"
        write_plugin_package(
            root,
            "n8n-nodes-base",
            {"Quitter": "import sys\nsys.exit(3)\n", "Slack": SLACK_MODULE},
        )

        result = scan_packages([BASE], [root])

        assert [n.node_name for n in result.nodes] == ["Slack"]
        assert isinstance(result.failures[0].original_error, SystemExit)

    def test_injected_logger_receives_failures(self, plugin_root):
        log = logging.getLogger("test.scanner.injected")
        records = []
        handler = logging.Handler()
        handler.emit = records.append  # type: ignore[method-assign]
        log.addHandler(handler)
        try:
            scan_packages([BASE], [plugin_root], log=log)
        finally:
            log.removeHandler(handler)

        assert any("Broken" in r.getMessage() for r in records if r.levelno == logging.WARNING)


class TestTemporarySyspath:
    """Test temporary sys.path manipulation."""

    def test_restores_path(self, tmp_path):
        original = sys.path.copy()

        with temporary_syspath([tmp_path]):
            assert sys.path[0] == str(tmp_path)

        assert sys.path == original

    def test_restores_path_on_error(self, tmp_path):
        original = sys.path.copy()

        try:
            with temporary_syspath([tmp_path]):
                raise RuntimeError("boom")
        except RuntimeError:
            pass

        assert sys.path == original
