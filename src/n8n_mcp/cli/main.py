"""n8n-mcp command-line entry point.

Commands:
    rebuild     Rebuild the node catalog from installed plugin packages
    search      Search the catalog by keyword
    info        Show details for one node type
    categories  List node categories
    release     Show the upstream release manifest for a tag
    serve       Run the MCP server on stdio
"""

import json
import logging
import sys
from pathlib import Path
from typing import Optional

import click

from n8n_mcp.catalog import CatalogStore, NodeQueryService, fetch_release_manifest, rebuild_catalog
from n8n_mcp.core.exceptions import N8nMcpError
from n8n_mcp.core.settings import N8nMcpSettings, SettingsManager

from .logging_config import configure_logging

logger = logging.getLogger(__name__)


def _settings(ctx: click.Context) -> N8nMcpSettings:
    settings: N8nMcpSettings = ctx.obj["settings"]
    return settings


def _open_query(settings: N8nMcpSettings) -> NodeQueryService:
    try:
        store = CatalogStore(settings.catalog.db_path, read_only=True)
    except N8nMcpError as e:
        click.echo(f"Error: {e}", err=True)
        click.echo("Run 'n8n-mcp rebuild' to build the catalog first.", err=True)
        sys.exit(1)
    return NodeQueryService(store)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Show progress and diagnostic logs")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """n8n node catalog and workflow tools for AI agents."""
    settings = SettingsManager().load()
    configure_logging(verbose, settings.log_level)
    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings
    ctx.obj["verbose"] = verbose


@cli.command()
@click.option("--version", "version_tag", help="Upstream release tag, e.g. n8n@2.0.3")
@click.option("--db", "db_path", type=click.Path(path_type=Path), help="Catalog database path")
@click.option("--no-remote-docs", is_flag=True, help="Skip fetching documentation from GitHub")
@click.pass_context
def rebuild(ctx: click.Context, version_tag: Optional[str], db_path: Optional[Path], no_remote_docs: bool) -> None:
    """Rebuild the node catalog from the installed plugin packages."""
    catalog = _settings(ctx).catalog.model_copy()
    if version_tag:
        catalog.version_tag = version_tag
    if db_path:
        catalog.db_path = db_path

    try:
        report = rebuild_catalog(catalog, fetch_docs=not no_remote_docs)
    except N8nMcpError as e:
        click.echo(f"Error: Failed to rebuild catalog: {e}", err=True)
        sys.exit(1)

    click.echo(f"Catalog rebuilt for n8n {report.version}: {report.db_path}")
    click.echo(f"  Nodes: {report.extracted}/{report.scanned}")
    click.echo(f"  Documentation: {report.docs_extracted}")

    with CatalogStore(Path(report.db_path)) as store:
        stats = NodeQueryService(store).statistics()
    for package in stats["by_package"]:
        click.echo(f"  {package['package_name']}: {package['count']}")
    click.echo(f"  AI nodes: {stats['ai_nodes']}")

    if report.failed:
        click.echo(f"  Failed: {report.failed}")
        for name, reason in [*report.load_failures, *report.extraction_failures]:
            click.echo(f"    - {name}: {reason}")


@cli.command()
@click.argument("keyword")
@click.option("--limit", default=10, show_default=True, help="Maximum number of results")
@click.pass_context
def search(ctx: click.Context, keyword: str, limit: int) -> None:
    """Search nodes by keyword."""
    query = _open_query(_settings(ctx))
    try:
        results = query.search(keyword, limit)
    finally:
        query.store.close()

    if not results:
        click.echo(f"No nodes found matching '{keyword}'")
        return
    for node in results:
        click.echo(f"  {node.node_type:40} {node.display_name}")


@cli.command()
@click.argument("node_type")
@click.pass_context
def info(ctx: click.Context, node_type: str) -> None:
    """Show full details for a node type as JSON."""
    query = _open_query(_settings(ctx))
    try:
        details = query.get_by_type(node_type)
    finally:
        query.store.close()

    if details is None:
        click.echo(f"Error: Node '{node_type}' not found", err=True)
        sys.exit(1)
    click.echo(json.dumps(details.model_dump(mode="json", exclude_none=True), indent=2))


@cli.command()
@click.pass_context
def categories(ctx: click.Context) -> None:
    """List node categories."""
    query = _open_query(_settings(ctx))
    try:
        names = query.list_categories()
    finally:
        query.store.close()
    for name in names:
        click.echo(name)


@cli.command()
@click.argument("tag", default="master")
@click.pass_context
def release(ctx: click.Context, tag: str) -> None:
    """Show the node lists of an upstream release tag."""
    try:
        manifest = fetch_release_manifest(tag, timeout=_settings(ctx).catalog.fetch_timeout)
    except N8nMcpError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(f"n8n {manifest.platform_version} ({manifest.fetched_from})")
    click.echo(f"  nodes-base: {len(manifest.base_node_files)} nodes")
    click.echo(f"  langchain: {len(manifest.extension_node_files)} nodes")
    for warning in manifest.warnings:
        click.echo(f"  Warning: {warning}", err=True)


@cli.command()
@click.pass_context
def serve(ctx: click.Context) -> None:
    """Run the MCP server on stdio."""
    from n8n_mcp.mcp_server.main import configure_logging as configure_server_logging
    from n8n_mcp.mcp_server.main import run_server

    configure_server_logging(debug=ctx.obj["verbose"])
    run_server()


if __name__ == "__main__":
    cli()
