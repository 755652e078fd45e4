"""CLI interface for docs ingestion."""
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

import click
from dotenv import load_dotenv

from ..config import DocsConfig
from ..errors import RouteConfigError
from ..read_service import ReadService
from ..snapshot import load_snapshot
from ..store import DocumentStore
from .github_client import GitHubClient
from .pipeline import IngestionPipeline
from .ref_resolver import RefResolver
from .registry import RegistryClient
from .routes import RouteTable, load_route_table

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def _load_routes(config: DocsConfig, routes_file: Optional[str]) -> RouteTable:
    path = Path(routes_file) if routes_file else config.routes_file
    try:
        return load_route_table(path, default_repo=config.default_repo)
    except RouteConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(2)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool):
    """Docs indexing CLI - fetch documentation from GitHub and build the search index."""
    load_dotenv()
    ctx.obj = DocsConfig.from_env()
    if verbose or ctx.obj.verbose:
        logging.getLogger().setLevel(logging.DEBUG)


@cli.command()
@click.option("--routes", "routes_file", help="Route table JSON (default: packaged routes)")
@click.option("--snapshot", "snapshot_path", help="Snapshot output path")
@click.option("--dry-run", is_flag=True, help="Fetch and index without writing the snapshot")
@click.pass_obj
def refresh(config: DocsConfig, routes_file: str, snapshot_path: str, dry_run: bool):
    """Run one ingestion cycle."""
    routes = _load_routes(config, routes_file)
    target = None if dry_run else Path(snapshot_path or config.snapshot_path)

    async def run():
        async with GitHubClient(config) as github:
            registry = RegistryClient(config)
            try:
                pipeline = IngestionPipeline(
                    routes=routes,
                    store=DocumentStore(),
                    github=github,
                    resolver=RefResolver(
                        registry,
                        github,
                        default_ref=config.default_ref,
                        repo_owner=config.repo_owner,
                    ),
                    config=config,
                    snapshot_path=target,
                )
                return await pipeline.run_cycle()
            finally:
                await registry.close()

    report = asyncio.run(run())

    click.echo("\n" + "=" * 60)
    click.echo("REFRESH RESULTS")
    click.echo("=" * 60)
    for repo, ref in report.refs.items():
        click.echo(f"  {repo}: {ref}")
    click.echo(f"\n  Documents: {report.fetched}/{report.total_routes} fetched")
    click.echo(f"  Missing: {report.stubbed}")
    click.echo(f"  Failed: {report.failed}")
    click.echo(f"  Indexed: {report.documents_indexed}")
    click.echo(f"  Snapshot: {target if report.persisted else 'not written'}")
    click.echo(f"  Duration: {report.duration_seconds:.1f}s")

    if report.broken_links:
        click.echo(f"\n  Broken links: {len(report.broken_links)}")
        for link in report.broken_links:
            click.echo(f"    - {link.source} -> {link.target}")

    if report.errors:
        click.echo(f"\n  Errors: {len(report.errors)}")
        for err in report.errors[:5]:
            click.echo(f"    - {err[:100]}")
        sys.exit(1)


@cli.command("routes")
@click.option("--routes", "routes_file", help="Route table JSON (default: packaged routes)")
@click.pass_obj
def list_routes(config: DocsConfig, routes_file: str):
    """List the route table."""
    routes = _load_routes(config, routes_file)

    click.echo(f"Site: {routes.site} ({len(routes.routes)} routes)")
    click.echo("-" * 40)
    for route in routes.sorted_routes():
        if route.is_content:
            ref = f"@{route.github_ref}" if route.github_ref else ""
            click.echo(f"  {route.name}: {route.path} <- {route.github_repo}/{route.github_path}{ref}")
        else:
            click.echo(f"  {route.name}: {route.path}")


@cli.command()
@click.argument("package")
@click.option("--repo", help="Repository to check (default: <owner>/<package>)")
@click.pass_obj
def resolve(config: DocsConfig, package: str, repo: str):
    """Print the branch matching PACKAGE's published npm version."""

    async def run():
        async with GitHubClient(config) as github:
            registry = RegistryClient(config)
            try:
                resolver = RefResolver(
                    registry,
                    github,
                    default_ref=config.default_ref,
                    repo_owner=config.repo_owner,
                )
                return await resolver.resolve(package, repo=repo)
            finally:
                await registry.close()

    click.echo(asyncio.run(run()))


@cli.command()
@click.argument("query")
@click.option("--limit", "-n", type=int, default=10, help="Max results")
@click.option("--snapshot", "snapshot_path", help="Snapshot to search")
@click.option("--routes", "routes_file", help="Route table JSON (default: packaged routes)")
@click.pass_obj
def search(config: DocsConfig, query: str, limit: int, snapshot_path: str, routes_file: str):
    """Search the persisted snapshot."""
    path = Path(snapshot_path or config.snapshot_path)
    loaded = load_snapshot(path)
    if loaded is None:
        click.echo(f"No usable snapshot at {path}. Run 'refresh' first.", err=True)
        sys.exit(1)

    corpus, index = loaded
    store = DocumentStore()
    store.put_many(corpus)
    store.publish(corpus, index)

    service = ReadService(store, _load_routes(config, routes_file))
    response = service.search(query, limit=limit)

    if not response.results:
        click.echo("No results.")
        return

    for idx, hit in enumerate(response.results, 1):
        click.echo(f"[{idx}] {hit.score:6.2f}  {hit.title}  {hit.permalink}")
        if hit.description:
            click.echo(f"          {hit.description}")


def main():
    """Entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
