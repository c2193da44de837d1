"""Plugin package scanner for the node catalog.

Locates each configured plugin package, reads the node module list declared
in its ``package.json`` manifest and loads every module. Nothing about the
node definitions is interpreted here.
"""

import importlib.util
import inspect
import json
import logging
import re
import sys
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from types import ModuleType
from typing import Any, Optional

from n8n_mcp.core.exceptions import ModuleLoadError
from n8n_mcp.core.settings import CORE_PACKAGES, PluginPackage

from .models import LoadedNode

logger = logging.getLogger(__name__)

NODE_FILE_PATTERN = re.compile(r"/([^/]+)\.node\.py$")


@dataclass
class ScanResult:
    """Successfully loaded nodes plus the per-module failures met on the way."""

    nodes: list[LoadedNode] = field(default_factory=list)
    failures: list[ModuleLoadError] = field(default_factory=list)
    skipped_packages: list[str] = field(default_factory=list)


@contextmanager
def temporary_syspath(paths: list[Path]) -> Iterator[None]:
    """Temporarily add paths to sys.path for imports."""
    original_path = sys.path.copy()
    try:
        for path in reversed(paths):
            sys.path.insert(0, str(path))
        yield
    finally:
        sys.path = original_path


def node_name_from_path(module_path: str) -> str:
    """Derive the node name from a manifest entry.

    ``dist/nodes/Slack/Slack.node.py`` -> ``Slack``
    """
    match = NODE_FILE_PATTERN.search(module_path)
    if match:
        return match.group(1)
    name = Path(module_path).name
    for suffix in (".node.py", ".py"):
        if name.endswith(suffix):
            return name[: -len(suffix)]
    return name


def locate_manifest(package: PluginPackage, search_paths: Sequence[Path]) -> Optional[Path]:
    """Return the first ``package.json`` found for the package under the search paths."""
    for base in search_paths:
        candidate = Path(base) / package.path / "package.json"
        if candidate.is_file():
            return candidate
    return None


def read_node_list(manifest_path: Path) -> list[str]:
    """Read the ``n8n.nodes`` list from a package manifest."""
    data = json.loads(manifest_path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{manifest_path} is not a JSON object")
    section = data.get("n8n") or {}
    if not isinstance(section, dict):
        raise ValueError(f"{manifest_path}: \"n8n\" section is not an object")
    nodes = section.get("nodes") or []
    if not isinstance(nodes, list):
        return []
    return [str(entry) for entry in nodes]


def _module_name(package_name: str, module_path: str) -> str:
    slug = re.sub(r"[^0-9A-Za-z_]", "_", f"{package_name}_{module_path}")
    return f"n8n_mcp_plugins.{slug}"


def load_module(package_root: Path, module_path: str, module_name: str) -> ModuleType:
    """Import a module from a file below ``package_root``."""
    file_path = (package_root / module_path).resolve()
    if not file_path.is_file():
        raise FileNotFoundError(f"No such module file: {file_path}")

    spec = importlib.util.spec_from_file_location(module_name, file_path)
    if spec is None or spec.loader is None:
        raise ImportError(f"Cannot create import spec for {file_path}")

    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except BaseException:
        sys.modules.pop(module_name, None)
        raise
    return module


def resolve_node_class(module: ModuleType, node_name: str) -> Optional[Any]:
    """Pick the node definition a module exposes.

    Order: ``default`` attribute, attribute named like the node, then the
    first class defined in the module itself.
    """
    node_class = getattr(module, "default", None) or getattr(module, node_name, None)
    if node_class is not None:
        return node_class

    for obj in vars(module).values():
        if inspect.isclass(obj) and obj.__module__ == module.__name__:
            return obj
    return None


def _scan_package(
    package: PluginPackage,
    manifest_path: Path,
    result: ScanResult,
    log: logging.Logger,
) -> None:
    package_root = manifest_path.parent
    node_paths = read_node_list(manifest_path)
    log.info(f"Found {len(node_paths)} nodes in {package.name} manifest")

    with temporary_syspath([package_root]):
        for module_path in node_paths:
            node_name = node_name_from_path(module_path)
            try:
                module = load_module(package_root, module_path, _module_name(package.name, module_path))
                node_class = resolve_node_class(module, node_name)
                if node_class is None:
                    raise ImportError("module defines no node class")
            except (Exception, SystemExit) as e:
                failure = ModuleLoadError(package.name, module_path, e)
                result.failures.append(failure)
                log.warning(str(failure))
                continue

            result.nodes.append(
                LoadedNode(
                    package_name=package.name,
                    node_name=node_name,
                    node_class=node_class,
                    module_path=module_path,
                )
            )
            log.debug(f"Loaded {node_name}")


def scan_packages(
    packages: Optional[Sequence[PluginPackage]] = None,
    search_paths: Optional[Sequence[Path]] = None,
    log: Optional[logging.Logger] = None,
) -> ScanResult:
    """
    Load every node module declared by the given plugin packages.

    SECURITY WARNING: loading a module executes its code. Only scan trusted
    package directories.

    Args:
        packages: Packages to scan, in order. Defaults to the core packages.
        search_paths: Directories holding the packages (like ``node_modules``).
        log: Logger to report progress and failures to (defaults to the module logger).

    Returns:
        ScanResult with the loaded nodes in manifest order
    """
    log = log or logger
    packages = list(CORE_PACKAGES if packages is None else packages)
    search_paths = [Path.cwd() / "node_modules"] if search_paths is None else list(search_paths)

    result = ScanResult()
    for package in packages:
        log.info(f"Loading package: {package.name}")
        manifest_path = locate_manifest(package, search_paths)
        if manifest_path is None:
            log.warning(f"Package manifest not found for {package.name}, skipping")
            result.skipped_packages.append(package.name)
            continue

        try:
            _scan_package(package, manifest_path, result, log)
        except (OSError, ValueError) as e:
            # Unreadable or malformed manifest
            log.warning(f"Failed to read manifest for {package.name}: {e}")
            result.skipped_packages.append(package.name)

    log.info(f"Loaded {len(result.nodes)} nodes, {len(result.failures)} failed")
    return result
