"""Reference resolution.

Decides which snapshot of a repository to fetch:

1. The latest release tag, if the provider reports one.
2. Otherwise the repository's default branch, as reported by its metadata API.
3. Otherwise the configured default branch (``main``).

Resolution never fails. Missing or unusable API data degrades to the next
step, and the final fallback is marked ``degraded`` so callers can say so.
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from tinygit import cli_logger
from tinygit.config import Settings
from tinygit.http import HttpTransport
from tinygit.jsonscan import extract_string_field
from tinygit.providers import get_profile
from tinygit.url import RepositoryRef


class ReferenceKind(str, Enum):
    """What a resolved reference names."""

    RELEASE = "release"
    BRANCH = "branch"


@dataclass(frozen=True)
class ResolvedReference:
    """A tag or branch to download.

    Attributes:
        kind: RELEASE for a tag name, BRANCH for a branch name.
        value: The tag or branch name.
        degraded: True when no provider data was available and the value is
            the configured fallback.
        explicit: True when the user named the branch; it is never swapped
            for the fallback branch.
    """

    kind: ReferenceKind
    value: str
    degraded: bool = False
    explicit: bool = False


def is_usable_reference(value: str) -> bool:
    """Check whether an API-reported reference can go into a URL path.

    Rejects empty values, whitespace, control characters, double quotes,
    backslashes, and ``..`` segments.
    """
    if not value:
        return False
    if any(ch.isspace() or ord(ch) < 0x20 or ch in '"\\' for ch in value):
        return False
    return ".." not in value.split("/")


def resolve_reference(
    repo: RepositoryRef,
    transport: HttpTransport,
    settings: Settings,
    on_progress: Callable[[str], None] = cli_logger.info,
) -> ResolvedReference:
    """Resolve the reference to download for a repository.

    Args:
        repo: Repository to resolve.
        transport: HTTP transport used for API queries.
        settings: Supplies the fallback branch name.
        on_progress: Receives one human-readable line per step.

    Returns:
        The most specific reference available. Never raises for missing
        data.
    """
    profile = get_profile(repo.provider, settings)

    release_url = profile.release_api_url(repo)
    if release_url is not None:
        on_progress(f"checking releases at: {release_url}")
        body = transport.fetch_text(release_url)
        tag_name = extract_string_field(body, "tag_name") if body is not None else None
        if tag_name and is_usable_reference(tag_name):
            on_progress(f"found release: {tag_name}")
            return ResolvedReference(kind=ReferenceKind.RELEASE, value=tag_name)
        on_progress("no releases found, falling back to branch download")

    return resolve_default_branch(repo, transport, settings)


def resolve_default_branch(
    repo: RepositoryRef,
    transport: HttpTransport,
    settings: Settings,
) -> ResolvedReference:
    """Ask the provider for the repository's default branch.

    Falls back to ``settings.default_branch`` when the provider has no API,
    the request fails, or the field is missing.
    """
    profile = get_profile(repo.provider, settings)

    metadata_url = profile.metadata_api_url(repo)
    if metadata_url is not None:
        body = transport.fetch_text(metadata_url)
        branch = extract_string_field(body, "default_branch") if body is not None else None
        if branch and is_usable_reference(branch):
            return ResolvedReference(kind=ReferenceKind.BRANCH, value=branch)

    return ResolvedReference(
        kind=ReferenceKind.BRANCH,
        value=settings.default_branch,
        degraded=True,
    )
