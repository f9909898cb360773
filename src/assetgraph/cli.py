"""assetgraph command line interface."""

import logging
import sys
from pathlib import Path

import click

from assetgraph import __version__
from assetgraph.asset.store import Store
from assetgraph.asset.targets import TARGETS, get_target
from assetgraph.exceptions import (
    AlreadyExistsError,
    AssetFailedError,
    ConfigurationError,
    DependencyCycleError,
)
from assetgraph.log import logger, set_loggers_level, setup

logger = logger.getChild(__name__)

EXIT_FAILED = 1
EXIT_CONFIG = 3
EXIT_ALREADY_EXISTS = 4
EXIT_CYCLE = 5
EXIT_INTERRUPTED = 130


class AssetGraphContext:
    """Context object passed to all commands."""

    def __init__(self, directory: Path = Path("."), quiet: int = 0, verbose: int = 0):
        self.directory = directory
        self.quiet = quiet
        self.verbose = verbose

    @property
    def store(self) -> Store:
        return Store(self.directory)


pass_context = click.make_pass_decorator(AssetGraphContext, ensure=True)


def exit_code_for(exc: BaseException) -> int:
    """Map an error to the CLI exit status."""
    if isinstance(exc, DependencyCycleError):
        return EXIT_CYCLE
    cause = exc.cause if isinstance(exc, AssetFailedError) else exc
    if isinstance(cause, AlreadyExistsError):
        return EXIT_ALREADY_EXISTS
    if isinstance(cause, ConfigurationError):
        return EXIT_CONFIG
    return EXIT_FAILED


@click.group()
@click.option(
    "-C",
    "--dir",
    "directory",
    default=".",
    type=click.Path(file_okay=False, path_type=Path),
    help="Asset directory to read from and write to.",
    metavar="<path>",
)
@click.option("-q", "--quiet", count=True, help="Be quiet.")
@click.option("-v", "--verbose", count=True, help="Be verbose.")
@click.version_option(__version__, "-V", "--version", prog_name="assetgraph")
@click.pass_context
def cli(ctx, directory: Path, quiet: int, verbose: int):
    """assetgraph - generate the assets needed to launch a cluster.

    Assets are resolved depth-first from the requested target. Output is
    written to the asset directory, and assets already on disk are reused
    (or, for the cluster itself, refused).
    """
    ctx.obj = AssetGraphContext(directory=directory, quiet=quiet, verbose=verbose)

    setup()
    if quiet:
        ctx.with_resource(set_loggers_level(logging.CRITICAL))
    elif verbose:
        ctx.with_resource(set_loggers_level(logging.DEBUG))


@cli.command()
@click.argument("target", type=click.Choice(list(TARGETS)))
@pass_context
def create(ctx: AssetGraphContext, target: str):
    """Generate TARGET and everything it depends on.

    \b
    Targets:
      install-config     install-config.yaml (from ASSETGRAPH_* variables)
      terraform-vars     terraform.tfvars
      admin-kubeconfig   auth/kubeconfig
      cluster            launch the cluster with terraform
    """
    store = ctx.store
    try:
        asset = store.fetch(get_target(target))
    except KeyboardInterrupt:
        click.echo("\nInterrupted", err=True)
        sys.exit(EXIT_INTERRUPTED)
    except (AssetFailedError, DependencyCycleError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(exit_code_for(e))

    for file in asset.files():
        logger.info("%s: %s", asset.name, store.directory / file.filename)


@cli.command()
@click.argument("target", type=click.Choice(list(TARGETS)), default="cluster")
@click.option(
    "-f",
    "--format",
    "fmt",
    type=click.Choice(["tree", "dot", "mermaid"]),
    default="tree",
    show_default=True,
    help="Output format.",
)
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write to a file instead of stdout.",
)
def graph(target: str, fmt: str, output: Path | None):
    """Show the dependency graph of TARGET (default: cluster)."""
    from assetgraph.viz import AssetGraph

    try:
        asset_graph = AssetGraph(get_target(target))
    except DependencyCycleError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_CYCLE)

    rendered = {
        "tree": asset_graph.to_tree,
        "dot": asset_graph.to_dot,
        "mermaid": asset_graph.to_mermaid,
    }[fmt]()

    if output:
        output.write_text(rendered + "\n")
        click.echo(f"Exported {fmt} to {output}", err=True)
    else:
        click.echo(rendered)


@cli.command("wait-for")
@click.argument("filename")
@click.option("--interval", type=float, default=5.0, show_default=True, help="Seconds between checks.")
@click.option("--timeout", type=float, default=None, help="Give up after this many seconds.")
@pass_context
def wait_for_cmd(ctx: AssetGraphContext, filename: str, interval: float, timeout: float | None):
    """Wait until FILENAME exists in the asset directory.

    Useful for sentinel files written by the bootstrap process.
    """
    from assetgraph.poll import WaitCancelledError, WaitTimeoutError, wait_for

    path = ctx.directory / filename
    try:
        wait_for(path.exists, interval=interval, timeout=timeout, description=str(path))
    except WaitTimeoutError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_FAILED)
    except (KeyboardInterrupt, WaitCancelledError):
        click.echo("\nInterrupted", err=True)
        sys.exit(EXIT_INTERRUPTED)
    click.echo(f"{path} exists")


def main(argv=None):
    """Console-script entry point."""
    return cli.main(args=argv, prog_name="assetgraph")
