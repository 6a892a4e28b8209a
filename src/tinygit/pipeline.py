"""Download and clone orchestration.

Runs the stages in order and owns every file they create:

    START -> PARSED -> RESOLVED -> LOCATED -> DOWNLOADED -> EXTRACTED -> DONE

Any stage may end the run in FAILED. URL problems fail before any network
access. A failed download of the default branch is retried once with the
fallback branch (``main`` -> ``master``). Archives and partially written
output are removed on every failure path.
"""

import shutil
import tempfile
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Annotated

from pydantic import AfterValidator, BaseModel, Field

from tinygit import cli_logger
from tinygit.config import Settings, load_settings
from tinygit.extract import extract_archive
from tinygit.http import HttpTransport, RequestsTransport
from tinygit.locate import ArchiveTarget, locate_archive
from tinygit.providers import ProviderProfile, get_profile
from tinygit.resolve import ReferenceKind, ResolvedReference, is_usable_reference, resolve_reference
from tinygit.retrieve import DownloadFailedError, retrieve_archive
from tinygit.scaffold import init_scaffold
from tinygit.url import RepositoryRef, parse_repo_url


class PipelineState(str, Enum):
    """Stages of a pipeline run."""

    START = "start"
    PARSED = "parsed"
    RESOLVED = "resolved"
    LOCATED = "located"
    DOWNLOADED = "downloaded"
    EXTRACTED = "extracted"
    DONE = "done"
    FAILED = "failed"


class DestinationExistsError(Exception):
    """Raised when a clone target exists and is not an empty directory."""


def _validate_branch(v: str) -> str:
    if not is_usable_reference(v):
        msg = "branch must be non-empty and contain no whitespace, quotes, or '..' segments"
        raise ValueError(msg)
    return v


BranchName = Annotated[str, AfterValidator(_validate_branch)]


class CloneOptions(BaseModel):
    """Inputs for a clone run."""

    url: str = Field(description="Repository URL")
    local_path: Path | None = Field(default=None, description="Target directory (default: ./{repo})")
    branch_override: BranchName | None = Field(default=None, description="Branch to fetch instead of resolving")
    verbose: bool = False
    allow_generic: bool = Field(default=False, description="Treat unknown hosts as generic providers")


class DownloadOptions(BaseModel):
    """Inputs for a download-only run."""

    url: str = Field(description="Repository URL")
    output_dir: Path = Field(default=Path("."), description="Directory the archive is saved in")
    branch_override: BranchName | None = Field(default=None, description="Branch to fetch instead of resolving")
    extract: bool = Field(default=False, description="Unpack the archive and delete it")
    verbose: bool = False
    allow_generic: bool = Field(default=False, description="Treat unknown hosts as generic providers")


@dataclass
class PipelineResult:
    """Outcome of a successful run.

    Attributes:
        repo: Parsed repository.
        reference: Reference that was actually downloaded (after any
            fallback retry).
        target: Archive URL, filename, and format that succeeded.
        archive_path: Downloaded archive, if it was kept.
        output_dir: Directory the archive was extracted into, if any.
        attempts: Every archive URL requested, in order.
    """

    repo: RepositoryRef
    reference: ResolvedReference
    target: ArchiveTarget
    archive_path: Path | None = None
    output_dir: Path | None = None
    attempts: list[str] = field(default_factory=list)


def _remove_file(path: Path) -> None:
    """Delete a file if present."""
    path.unlink(missing_ok=True)


def _is_occupied(path: Path) -> bool:
    """True if path exists and is anything other than an empty directory."""
    if not path.exists():
        return False
    if not path.is_dir():
        return True
    return any(path.iterdir())


def _discard_output(target_dir: Path, created: bool) -> None:
    """Remove whatever a failed clone wrote into target_dir."""
    if created:
        shutil.rmtree(target_dir, ignore_errors=True)
        return
    # Directory was empty before the run
    for entry in target_dir.iterdir():
        if entry.is_dir() and not entry.is_symlink():
            shutil.rmtree(entry, ignore_errors=True)
        else:
            entry.unlink(missing_ok=True)


class Pipeline:
    """Sequences resolution, download, extraction, and scaffolding.

    One Pipeline may run several times; state and history describe the most
    recent run.
    """

    def __init__(
        self,
        transport: HttpTransport,
        settings: Settings,
        on_progress: Callable[[str], None] = cli_logger.info,
        on_detail: Callable[[str], None] = cli_logger.dim,
    ) -> None:
        self._transport = transport
        self._settings = settings
        self._on_progress = on_progress
        self._on_detail = on_detail
        self._verbose = False
        self.state = PipelineState.START
        self.history: list[PipelineState] = [PipelineState.START]

    def _begin(self, verbose: bool) -> None:
        self._verbose = verbose
        self.state = PipelineState.START
        self.history = [PipelineState.START]

    def _advance(self, state: PipelineState) -> None:
        self.state = state
        self.history.append(state)

    def _detail(self, message: str) -> None:
        if self._verbose:
            self._on_detail(message)

    def _parse(self, url: str, allow_generic: bool) -> RepositoryRef:
        repo = parse_repo_url(url, allow_generic=allow_generic)
        self._detail(f"service: {repo.provider.value}, owner: {repo.owner}, repo: {repo.name}")
        self._advance(PipelineState.PARSED)
        return repo

    def _resolve(self, repo: RepositoryRef, branch_override: str | None) -> ResolvedReference:
        if branch_override is not None:
            self._on_progress(f"using branch: {branch_override}")
            reference = ResolvedReference(
                kind=ReferenceKind.BRANCH, value=branch_override, explicit=True
            )
        else:
            reference = resolve_reference(repo, self._transport, self._settings, self._on_progress)
            if reference.degraded:
                self._detail(
                    f"no branch information available, assuming '{reference.value}'"
                )
        self._advance(PipelineState.RESOLVED)
        return reference

    def _can_retry(self, reference: ResolvedReference) -> bool:
        return (
            reference.kind == ReferenceKind.BRANCH
            and not reference.explicit
            and reference.value == self._settings.default_branch
            and self._settings.fallback_branch != self._settings.default_branch
        )

    def _attempt(
        self,
        repo: RepositoryRef,
        reference: ResolvedReference,
        profile: ProviderProfile,
        directory: Path,
        attempts: list[str],
    ) -> tuple[ArchiveTarget, Path]:
        target = locate_archive(repo, reference, profile)
        self._advance(PipelineState.LOCATED)
        archive = directory / target.local_filename
        attempts.append(target.url)

        self._on_progress(f"downloading: {target.url}")
        self._detail(f"saving as: {archive}")
        try:
            retrieve_archive(self._transport, target.url, archive)
        except BaseException:
            _remove_file(archive)
            raise
        return target, archive

    def _fetch(
        self,
        repo: RepositoryRef,
        reference: ResolvedReference,
        directory: Path,
        attempts: list[str],
    ) -> tuple[ResolvedReference, ArchiveTarget, Path]:
        """Download the archive, retrying once with the fallback branch."""
        profile = get_profile(repo.provider, self._settings)
        try:
            target, archive = self._attempt(repo, reference, profile, directory, attempts)
        except DownloadFailedError as e:
            if not self._can_retry(reference):
                raise
            self._on_progress(
                f"{e}; retrying with branch '{self._settings.fallback_branch}'"
            )
            reference = ResolvedReference(
                kind=ReferenceKind.BRANCH,
                value=self._settings.fallback_branch,
                degraded=reference.degraded,
            )
            target, archive = self._attempt(repo, reference, profile, directory, attempts)

        self._advance(PipelineState.DOWNLOADED)
        return reference, target, archive

    def download(self, options: DownloadOptions) -> PipelineResult:
        """Download a repository archive, optionally unpacking it.

        Without ``extract`` the archive is left in ``output_dir``. With it,
        the archive is unpacked into ``output_dir`` as-is (keeping the
        provider's top-level folder) and then deleted.

        Raises:
            MalformedURLError: If the URL cannot be parsed.
            UnsupportedProviderError: If the host is unknown.
            DownloadFailedError: If the download (and any retry) fails.
            ExtractionFailedError: If unpacking fails.
        """
        self._begin(options.verbose)
        try:
            repo = self._parse(options.url, options.allow_generic)
            reference = self._resolve(repo, options.branch_override)

            output_dir = options.output_dir
            output_dir.mkdir(parents=True, exist_ok=True)
            attempts: list[str] = []
            reference, target, archive = self._fetch(repo, reference, output_dir, attempts)

            if not options.extract:
                self._on_progress(f"download successful: {archive}")
                self._advance(PipelineState.DONE)
                return PipelineResult(
                    repo=repo,
                    reference=reference,
                    target=target,
                    archive_path=archive,
                    attempts=attempts,
                )

            self._on_progress(f"extracting: {archive.name}")
            try:
                extract_archive(archive, output_dir, target.format)
            finally:
                _remove_file(archive)
            self._advance(PipelineState.EXTRACTED)
            self._advance(PipelineState.DONE)
            return PipelineResult(
                repo=repo,
                reference=reference,
                target=target,
                output_dir=output_dir,
                attempts=attempts,
            )
        except Exception:
            self._advance(PipelineState.FAILED)
            raise

    def clone(self, options: CloneOptions) -> PipelineResult:
        """Materialize a repository snapshot as a directory.

        The archive is downloaded into a temporary directory, unpacked into
        the target with its top-level folder stripped, and deleted. A
        placeholder ``.git`` directory is then created. The result is not a
        real git checkout.

        Raises:
            MalformedURLError: If the URL cannot be parsed.
            UnsupportedProviderError: If the host is unknown.
            DestinationExistsError: If the target is a file or non-empty
                directory.
            DownloadFailedError: If the download (and any retry) fails.
            ExtractionFailedError: If unpacking fails.
            ScaffoldFailedError: If the metadata directory cannot be created.
        """
        self._begin(options.verbose)
        try:
            repo = self._parse(options.url, options.allow_generic)

            target_dir = options.local_path or Path(repo.name)
            if _is_occupied(target_dir):
                msg = f"Destination '{target_dir}' already exists and is not an empty directory"
                raise DestinationExistsError(msg)

            reference = self._resolve(repo, options.branch_override)

            attempts: list[str] = []
            with tempfile.TemporaryDirectory(prefix="tinygit-") as tmp:
                reference, target, archive = self._fetch(repo, reference, Path(tmp), attempts)

                created = not target_dir.exists()
                self._on_progress(f"extracting into: {target_dir}")
                try:
                    extract_archive(archive, target_dir, target.format, strip_components=1)
                    self._advance(PipelineState.EXTRACTED)
                    _remove_file(archive)
                    git_dir = init_scaffold(target_dir)
                except Exception:
                    _discard_output(target_dir, created)
                    raise
                self._detail(f"created placeholder metadata: {git_dir}")

            self._advance(PipelineState.DONE)
            return PipelineResult(
                repo=repo,
                reference=reference,
                target=target,
                output_dir=target_dir,
                attempts=attempts,
            )
        except Exception:
            self._advance(PipelineState.FAILED)
            raise


def _run(run: Callable[[Pipeline], PipelineResult], settings: Settings | None) -> PipelineResult:
    """Build real dependencies, run, and release the HTTP session."""
    settings = settings or load_settings()
    transport = RequestsTransport(settings)
    try:
        return run(Pipeline(transport, settings))
    finally:
        transport.close()


def download_repository(options: DownloadOptions, settings: Settings | None = None) -> PipelineResult:
    """Convenience wrapper used by the CLI for ``tinygit download``."""
    return _run(lambda pipeline: pipeline.download(options), settings)


def clone_repository(options: CloneOptions, settings: Settings | None = None) -> PipelineResult:
    """Convenience wrapper used by the CLI for ``tinygit clone``."""
    return _run(lambda pipeline: pipeline.clone(options), settings)
