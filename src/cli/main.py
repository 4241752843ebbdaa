"""Main CLI entry point for the mounter command.

This module provides the Typer application behind the `mounter` command
and its three subcommands: push, pull and tree.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import typer

from src.cli.models import ExitCode
from src.cli.output import OutputHandler
from src.cli.sync_command import SyncCommand
from src.sync.push_engine import PushOptions

app = typer.Typer(
    name="mounter",
    help="""Mirror a site between a local directory and the engine.

QUICK START:
  mounter push ./my-site                  # Local site -> engine
  mounter pull ./my-site                  # Engine -> local site
  mounter tree ./my-site --locale fr      # Show the page tree""",
    add_completion=False,
    rich_markup_mode=None,
    no_args_is_help=True,
)

# Module logger
logger = logging.getLogger(__name__)


def _configure_logging(verbosity: int, logdir: Optional[str] = None) -> None:
    """Configure logging based on verbosity level.

    Configures only the 'src' namespace logger to avoid affecting third-party
    libraries. The root logger is left unchanged.

    Args:
        verbosity: Verbosity level (0=WARNING, 1=INFO, 2=DEBUG)
        logdir: Optional directory for log files (creates timestamped log file)
    """
    if verbosity == 0:
        level = logging.WARNING
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG

    app_logger = logging.getLogger("src")
    app_logger.setLevel(level)
    # Repeated invocations in one process (tests) must not stack handlers
    app_logger.handlers.clear()

    date_format = "%Y-%m-%d %H:%M:%S"
    formatter = logging.Formatter("%(asctime)s [%(levelname)8s] %(message)s", datefmt=date_format)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    app_logger.addHandler(console_handler)

    if logdir:
        log_path = Path(logdir)
        log_path.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = log_path / f"mounter_{timestamp}.log"

        file_formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt=date_format
        )
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(file_formatter)
        app_logger.addHandler(file_handler)

        logger.info(f"Logging to file: {log_file}")


def _command(verbosity: int, logdir: Optional[str], no_color: bool) -> SyncCommand:
    _configure_logging(verbosity, logdir)
    return SyncCommand(output_handler=OutputHandler(verbosity=verbosity, no_color=no_color))


@app.command()
def push(
    path: str = typer.Argument(..., help="Site directory"),
    env: str = typer.Option("production", "--env", "-e", help="Environment of config/deploy.yml"),
    force: bool = typer.Option(
        False, "--force", "-f",
        help="Update the remote site in every locale and send full page payloads",
    ),
    force_assets: bool = typer.Option(False, "--force-assets", help="Re-upload content assets whose size changed"),
    data: bool = typer.Option(False, "--data", "-d", help="Also push content entries and editable elements"),
    no_translations: bool = typer.Option(False, "--no-translations", help="Do not push translation keys"),
    only: Optional[List[str]] = typer.Option(
        None, "--only",
        help="Push only these resources (can be used multiple times): snippets, content_types, "
             "content_entries, translations, pages",
        metavar="RESOURCE",
    ),
    logdir: Optional[str] = typer.Option(None, "--logdir", help="Directory for log files"),
    verbosity: int = typer.Option(0, "--verbosity", "-v", help="Verbosity level: 0=summary, 1=info, 2=debug"),
    no_color: bool = typer.Option(False, "--no-color", help="Disable colored output"),
) -> None:
    """Push a local site to the engine."""
    options = PushOptions(
        force=force,
        force_assets=force_assets,
        data=data,
        translations=not no_translations,
        only=only or None,
    )
    exit_code = _command(verbosity, logdir, no_color).push(path, env, options)
    raise typer.Exit(int(exit_code))


@app.command()
def pull(
    path: str = typer.Argument(..., help="Site directory (created when missing)"),
    env: str = typer.Option("production", "--env", "-e", help="Environment of config/deploy.yml"),
    data: bool = typer.Option(False, "--data", "-d", help="Also pull content entries and editable elements"),
    logdir: Optional[str] = typer.Option(None, "--logdir", help="Directory for log files"),
    verbosity: int = typer.Option(0, "--verbosity", "-v", help="Verbosity level: 0=summary, 1=info, 2=debug"),
    no_color: bool = typer.Option(False, "--no-color", help="Disable colored output"),
) -> None:
    """Pull the remote site into a local directory."""
    exit_code = _command(verbosity, logdir, no_color).pull(path, env, data)
    raise typer.Exit(int(exit_code))


@app.command()
def tree(
    path: str = typer.Argument(..., help="Site directory"),
    locale: Optional[str] = typer.Option(None, "--locale", "-l", help="Locale to display (default locale when omitted)"),
    verbosity: int = typer.Option(0, "--verbosity", "-v", help="Verbosity level: 0=summary, 1=info, 2=debug"),
    no_color: bool = typer.Option(False, "--no-color", help="Disable colored output"),
) -> None:
    """Print the page tree of a local site."""
    exit_code = _command(verbosity, None, no_color).tree(path, locale)
    raise typer.Exit(int(exit_code))


def main() -> None:
    """Main entry point for the CLI application."""
    app()


# Allow running as: python -m src.cli.main
if __name__ == "__main__":
    main()
