"""tinygit CLI entry point."""

import sys
from collections.abc import Callable
from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError

from tinygit import __version__, cli_logger, exit_codes
from tinygit.config import ConfigError, Settings, load_settings
from tinygit.errors import format_validation_errors, handle_cli_error
from tinygit.extract import ExtractionFailedError
from tinygit.pipeline import (
    CloneOptions,
    DestinationExistsError,
    DownloadOptions,
    PipelineResult,
    clone_repository,
    download_repository,
)
from tinygit.retrieve import DownloadFailedError
from tinygit.scaffold import ScaffoldFailedError
from tinygit.url import KNOWN_HOSTS, MalformedURLError, UnsupportedProviderError

app = typer.Typer(
    name="tinygit",
    help="Fetch repository snapshots from GitHub, GitLab, and Codeberg without git.",
    no_args_is_help=True,
)

SUPPORTED_FORMATS = [f"https://{host}/owner/repo" for host in KNOWN_HOSTS]


def require_settings() -> Settings:
    """Load user settings or exit with CONFIG_INVALID."""
    try:
        return load_settings()
    except ConfigError as e:
        cli_logger.error(str(e))
        raise typer.Exit(exit_codes.CONFIG_INVALID) from None


def _run_pipeline(
    run: Callable[..., PipelineResult],
    options: CloneOptions | DownloadOptions,
) -> PipelineResult:
    """Run a pipeline and translate its failures into exit codes."""
    settings = require_settings()
    try:
        return run(options, settings)
    except MalformedURLError as e:
        cli_logger.error(f"Invalid repository URL: {e}")
        cli_logger.dim("  Supported formats:")
        for fmt in SUPPORTED_FORMATS:
            cli_logger.dim(f"    {fmt}")
        raise typer.Exit(exit_codes.MALFORMED_URL) from None
    except UnsupportedProviderError as e:
        cli_logger.error(str(e))
        cli_logger.dim("  Use --generic to try the host anyway.")
        raise typer.Exit(exit_codes.UNSUPPORTED_PROVIDER) from None
    except DestinationExistsError as e:
        cli_logger.error(str(e))
        raise typer.Exit(exit_codes.DESTINATION_EXISTS) from None
    except DownloadFailedError as e:
        cli_logger.error(f"Download failed: {e}")
        raise typer.Exit(exit_codes.DOWNLOAD_FAILED) from None
    except ExtractionFailedError as e:
        cli_logger.error(str(e))
        raise typer.Exit(exit_codes.EXTRACTION_FAILED) from None
    except ScaffoldFailedError as e:
        cli_logger.error(str(e))
        raise typer.Exit(exit_codes.SCAFFOLD_FAILED) from None


def _build_options(model: type, **kwargs: object) -> CloneOptions | DownloadOptions:
    """Validate command-line input into an options model."""
    try:
        return model(**kwargs)
    except ValidationError as e:
        cli_logger.error(f"Invalid arguments: {format_validation_errors(e)}")
        raise typer.Exit(exit_codes.INVALID_ARGS) from None


def version_callback(value: bool) -> None:
    """Print the version and exit."""
    if value:
        cli_logger.info(f"tinygit v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """Fetch repository snapshots from hosting providers without git."""


@app.command()
def download(
    url: Annotated[
        str,
        typer.Argument(help="Repository URL, e.g. https://github.com/owner/repo."),
    ],
    output_dir: Annotated[
        Path,
        typer.Option("--output-dir", "-o", help="Directory to save the archive in."),
    ] = Path("."),
    branch: Annotated[
        str | None,
        typer.Option("--branch", "-b", help="Download this branch instead of the latest release."),
    ] = None,
    extract: Annotated[
        bool,
        typer.Option("--extract", help="Unpack the archive and delete it afterwards."),
    ] = False,
    generic: Annotated[
        bool,
        typer.Option("--generic", help="Treat unknown hosts as {url}/archive/{ref}.tar.gz servers."),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show URLs and file names."),
    ] = False,
) -> None:
    """Download the latest release (or default branch) archive of a repository."""
    options = _build_options(
        DownloadOptions,
        url=url,
        output_dir=output_dir,
        branch_override=branch,
        extract=extract,
        verbose=verbose,
        allow_generic=generic,
    )
    result = _run_pipeline(download_repository, options)

    if result.archive_path is not None:
        cli_logger.success(f"Saved {result.archive_path}")
    else:
        cli_logger.success(
            f"Extracted {result.repo.display_name}@{result.reference.value} into {result.output_dir}"
        )
    raise typer.Exit(exit_codes.SUCCESS)


@app.command()
def clone(
    url: Annotated[
        str,
        typer.Argument(help="Repository URL, e.g. https://codeberg.org/owner/repo.git."),
    ],
    path: Annotated[
        Path | None,
        typer.Argument(help="Target directory (default: repository name)."),
    ] = None,
    branch: Annotated[
        str | None,
        typer.Option("--branch", "-b", help="Fetch this branch instead of the latest release."),
    ] = None,
    generic: Annotated[
        bool,
        typer.Option("--generic", help="Treat unknown hosts as {url}/archive/{ref}.tar.gz servers."),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show URLs and file names."),
    ] = False,
) -> None:
    """Unpack a repository snapshot into a directory with placeholder .git metadata.

    The snapshot comes from the provider's source archive, not the git
    protocol. The .git directory has no history or objects and is not a
    working git repository.
    """
    options = _build_options(
        CloneOptions,
        url=url,
        local_path=path,
        branch_override=branch,
        verbose=verbose,
        allow_generic=generic,
    )
    result = _run_pipeline(clone_repository, options)

    cli_logger.success(
        f"Cloned {result.repo.display_name}@{result.reference.value} into {result.output_dir}"
    )
    cli_logger.dim("  Note: .git is a placeholder without history; git commands will not work.")
    raise typer.Exit(exit_codes.SUCCESS)


def main_cli() -> None:
    """CLI entry point with top-level exception handling.

    Wraps the Typer app to catch any unhandled exceptions and format them
    as clean error messages instead of raw tracebacks.
    """
    try:
        app()
    except Exception as e:
        sys.exit(handle_cli_error(e))


if __name__ == "__main__":
    main_cli()
