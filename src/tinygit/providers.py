"""Provider registry.

One ProviderProfile per hosting service describes where its REST API lives,
how its archive URLs are shaped, and which archive format it serves. All
provider-specific knowledge is in the PROVIDERS table; adding a provider
means adding one record.

Templates are ``str.format`` strings. Placeholders available to every
template:

- ``web``: web origin (``https://github.com``)
- ``api``: REST API base
- ``owner``, ``repo``: percent-encoded path segments
- ``project``: ``owner/repo`` encoded as a single segment (``owner%2Frepo``)
- ``ref``: reference, percent-encoded except for ``/``
- ``ref_slug``: reference with ``/`` replaced by ``-``
- ``ext``: archive file extension
"""

import dataclasses
from dataclasses import dataclass
from enum import Enum
from urllib.parse import quote

from tinygit.config import Settings
from tinygit.url import Provider, RepositoryRef


class ArchiveFormat(str, Enum):
    """Archive formats providers serve. The value is the file extension."""

    ZIP = "zip"
    TAR_GZ = "tar.gz"

    @property
    def extension(self) -> str:
        """File extension without a leading dot."""
        return self.value


@dataclass(frozen=True)
class ProviderProfile:
    """Static description of one hosting provider.

    A profile with ``api_base`` None has no REST API: reference resolution
    falls straight through to the default branch. A profile with
    ``web_base`` None builds archive URLs from the repository's own origin.
    """

    provider: Provider
    web_base: str | None
    api_base: str | None
    release_api_template: str | None
    metadata_api_template: str | None
    release_archive_template: str
    branch_archive_template: str
    release_format: ArchiveFormat
    branch_format: ArchiveFormat

    def web_origin(self, repo: RepositoryRef) -> str:
        """Origin used for archive links."""
        return self.web_base or repo.origin

    def placeholders(self, repo: RepositoryRef, ref: str = "") -> dict[str, str]:
        """Build the template substitutions for a repository and reference."""
        return {
            "web": self.web_origin(repo),
            "api": self.api_base or "",
            "owner": quote(repo.owner, safe=""),
            "repo": quote(repo.name, safe=""),
            "project": quote(f"{repo.owner}/{repo.name}", safe=""),
            "ref": quote(ref, safe="/"),
            "ref_slug": ref_slug(ref),
        }

    def release_api_url(self, repo: RepositoryRef) -> str | None:
        """URL of the "latest release" endpoint, or None without an API."""
        if self.api_base is None or self.release_api_template is None:
            return None
        return self.release_api_template.format(**self.placeholders(repo))

    def metadata_api_url(self, repo: RepositoryRef) -> str | None:
        """URL of the repository metadata endpoint, or None without an API."""
        if self.api_base is None or self.metadata_api_template is None:
            return None
        return self.metadata_api_template.format(**self.placeholders(repo))


def ref_slug(ref: str) -> str:
    """Make a reference safe for use in a filename."""
    return ref.replace("/", "-")


PROVIDERS: dict[Provider, ProviderProfile] = {
    Provider.GITHUB: ProviderProfile(
        provider=Provider.GITHUB,
        web_base="https://github.com",
        api_base="https://api.github.com/repos",
        release_api_template="{api}/{owner}/{repo}/releases/latest",
        metadata_api_template="{api}/{owner}/{repo}",
        release_archive_template="{web}/{owner}/{repo}/archive/refs/tags/{ref}.{ext}",
        branch_archive_template="{web}/{owner}/{repo}/archive/refs/heads/{ref}.{ext}",
        release_format=ArchiveFormat.TAR_GZ,
        branch_format=ArchiveFormat.ZIP,
    ),
    Provider.GITLAB: ProviderProfile(
        provider=Provider.GITLAB,
        web_base="https://gitlab.com",
        api_base="https://gitlab.com/api/v4/projects",
        release_api_template="{api}/{project}/releases/permalink/latest",
        metadata_api_template="{api}/{project}",
        release_archive_template="{web}/{owner}/{repo}/-/archive/{ref}/{repo}-{ref_slug}.{ext}",
        branch_archive_template="{web}/{owner}/{repo}/-/archive/{ref}/{repo}-{ref_slug}.{ext}",
        release_format=ArchiveFormat.TAR_GZ,
        branch_format=ArchiveFormat.TAR_GZ,
    ),
    Provider.CODEBERG: ProviderProfile(
        provider=Provider.CODEBERG,
        web_base="https://codeberg.org",
        api_base="https://codeberg.org/api/v1/repos",
        release_api_template="{api}/{owner}/{repo}/releases/latest",
        metadata_api_template="{api}/{owner}/{repo}",
        release_archive_template="{web}/{owner}/{repo}/archive/{ref}.{ext}",
        branch_archive_template="{web}/{owner}/{repo}/archive/{ref}.{ext}",
        release_format=ArchiveFormat.ZIP,
        branch_format=ArchiveFormat.ZIP,
    ),
    Provider.GENERIC: ProviderProfile(
        provider=Provider.GENERIC,
        web_base=None,
        api_base=None,
        release_api_template=None,
        metadata_api_template=None,
        release_archive_template="{web}/{owner}/{repo}/archive/{ref}.{ext}",
        branch_archive_template="{web}/{owner}/{repo}/archive/{ref}.{ext}",
        release_format=ArchiveFormat.TAR_GZ,
        branch_format=ArchiveFormat.TAR_GZ,
    ),
}


def get_profile(provider: Provider, settings: Settings | None = None) -> ProviderProfile:
    """Look up the profile for a provider, applying user format preferences.

    Args:
        provider: Provider to look up.
        settings: User settings. Only ``codeberg_prefer_tar_gz`` affects
            the result.

    Returns:
        The provider's profile. The PROVIDERS table itself is never modified.
    """
    profile = PROVIDERS[provider]
    if provider == Provider.CODEBERG and settings is not None and settings.codeberg_prefer_tar_gz:
        return dataclasses.replace(
            profile,
            release_format=ArchiveFormat.TAR_GZ,
            branch_format=ArchiveFormat.TAR_GZ,
        )
    return profile
