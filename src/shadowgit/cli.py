"""Command-line interface for the ShadowGit MCP server.

Commands:
- shadowgit-mcp serve: Run the MCP server over stdio (default)
- shadowgit-mcp list-repos: Show the repositories ShadowGit tracks
- shadowgit-mcp git <repo> <command>: Run one read-only git command through the gateway
- shadowgit-mcp audit-tail: Print recent audit events
"""

from __future__ import annotations

import asyncio
from collections import deque

import click

from . import __version__
from .audit import AuditSink
from .config import ShadowGitConfig, load_config
from .gateway import GitExecutor, RepositoryResolver
from .logging_utils import configure_logging
from .repositories import load_repositories
from .responses import format_repository_list
from .server import ShadowGitServer
from .types import InvocationTrust


def _config(ctx: click.Context) -> ShadowGitConfig:
    return ctx.obj["config"]


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="shadowgit-mcp")
@click.option("--config", "-c", type=click.Path(exists=True, dir_okay=False), help="Config file path")
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warn", "error"]),
    default=None,
    help="Override the configured log level.",
)
@click.pass_context
def cli(ctx: click.Context, config: str | None, log_level: str | None) -> None:
    """ShadowGit MCP - read-only git access and checkpoints for AI assistants."""
    shadowgit_config = load_config(config)
    if log_level:
        shadowgit_config.logging.level = "warning" if log_level == "warn" else log_level
    configure_logging(shadowgit_config.logging.level)

    ctx.ensure_object(dict)
    ctx.obj["config"] = shadowgit_config

    if ctx.invoked_subcommand is None:
        ctx.invoke(serve)


@cli.command()
@click.pass_context
def serve(ctx: click.Context) -> None:
    """Run the MCP server on stdin/stdout."""
    server = ShadowGitServer(_config(ctx))
    try:
        asyncio.run(server.serve())
    except KeyboardInterrupt:
        pass


@cli.command("list-repos")
@click.pass_context
def list_repos(ctx: click.Context) -> None:
    """List repositories from ShadowGit's repos.json."""
    config = _config(ctx)
    repos = load_repositories(config.repos_file)
    click.echo(format_repository_list(repos))


@cli.command()
@click.argument("repo")
@click.argument("command")
@click.pass_context
def git(ctx: click.Context, repo: str, command: str) -> None:
    """Run a read-only git COMMAND against REPO (name or path).

    Example:
        shadowgit-mcp git my-project "log --oneline -5"
    """
    config = _config(ctx)
    resolver = RepositoryResolver(load_repositories(config.repos_file))
    resolved = resolver.resolve(repo)
    if resolved is None:
        raise click.ClickException(f"Repository '{repo}' not found.")

    audit = AuditSink(enabled=config.audit.enabled, path=config.audit_path)
    executor = GitExecutor(config.gateway, audit=audit)
    outcome = asyncio.run(executor.execute(command, resolved, InvocationTrust.EXTERNAL))

    click.echo(outcome.render())
    if not outcome.ok:
        ctx.exit(1)


@cli.command("audit-tail")
@click.option("--lines", "-n", type=int, default=20, show_default=True)
@click.pass_context
def audit_tail(ctx: click.Context, lines: int) -> None:
    """Print the last N audit events."""
    audit_path = _config(ctx).audit_path
    if not audit_path.exists():
        raise click.ClickException(f"Audit file not found: {audit_path}")

    with open(audit_path, encoding="utf-8") as f:
        tail = deque(f, maxlen=max(0, lines))

    for ln in tail:
        click.echo(ln, nl=False)


def main() -> None:
    """Entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
