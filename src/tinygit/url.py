"""Repository URL parsing.

Splits ``scheme://host/owner/repo[.git]`` into a RepositoryRef. Only the
three known hosts are accepted unless the caller opts into the generic
provider, in which case any host is taken at face value.
"""

from dataclasses import dataclass
from enum import Enum


class Provider(str, Enum):
    """Git hosting service a repository lives on."""

    GITHUB = "github"
    GITLAB = "gitlab"
    CODEBERG = "codeberg"
    GENERIC = "generic"


KNOWN_HOSTS: dict[str, Provider] = {
    "github.com": Provider.GITHUB,
    "gitlab.com": Provider.GITLAB,
    "codeberg.org": Provider.CODEBERG,
}

GIT_SUFFIX = ".git"


class MalformedURLError(ValueError):
    """Raised when a URL is not of the form scheme://host/owner/repo."""


class UnsupportedProviderError(ValueError):
    """Raised when the URL host is not a known provider."""

    def __init__(self, host: str) -> None:
        """Initialize with the host that was rejected."""
        self.host = host
        supported = ", ".join(KNOWN_HOSTS)
        super().__init__(f"Unsupported host '{host}' (supported: {supported})")


@dataclass(frozen=True)
class RepositoryRef:
    """A repository on a hosting provider.

    Attributes:
        provider: Which hosting service the repository lives on.
        owner: User or group that owns the repository.
        name: Repository name, without any ``.git`` suffix.
        origin: ``scheme://host`` the URL was given with.
    """

    provider: Provider
    owner: str
    name: str
    origin: str

    @property
    def display_name(self) -> str:
        """Return ``owner/name``."""
        return f"{self.owner}/{self.name}"


def parse_repo_url(url: str, allow_generic: bool = False) -> RepositoryRef:
    """Parse a repository URL into provider, owner, and name.

    Args:
        url: Absolute URL such as ``https://github.com/owner/repo.git``.
        allow_generic: Accept unknown hosts as Provider.GENERIC instead of
            failing.

    Returns:
        RepositoryRef for the URL.

    Raises:
        MalformedURLError: If the scheme, host, owner, or name is missing.
        UnsupportedProviderError: If the host is unknown and allow_generic
            is False.
    """
    url = url.strip()
    scheme, sep, rest = url.partition("://")
    if not sep or not scheme:
        msg = f"Missing scheme separator '://' in '{url}'"
        raise MalformedURLError(msg)

    host, sep, path = rest.partition("/")
    if not sep or not host:
        msg = f"Missing repository path after host in '{url}'"
        raise MalformedURLError(msg)

    provider = KNOWN_HOSTS.get(host)
    if provider is None:
        if not allow_generic:
            raise UnsupportedProviderError(host)
        provider = Provider.GENERIC

    owner, sep, remainder = path.partition("/")
    if not sep:
        msg = f"Missing repository name in '{url}' (expected {scheme}://{host}/owner/repo)"
        raise MalformedURLError(msg)

    # Anything after the repository segment (/tree/main, trailing slash) is ignored
    name = remainder.split("/", 1)[0]
    if name.endswith(GIT_SUFFIX):
        name = name[: -len(GIT_SUFFIX)]

    if not owner or not name:
        msg = f"Empty owner or repository name in '{url}'"
        raise MalformedURLError(msg)

    return RepositoryRef(
        provider=provider,
        owner=owner,
        name=name,
        origin=f"{scheme}://{host}",
    )
