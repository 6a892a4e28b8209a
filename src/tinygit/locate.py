"""Archive URL and filename construction."""

from dataclasses import dataclass

from tinygit.providers import ArchiveFormat, ProviderProfile, ref_slug
from tinygit.resolve import ReferenceKind, ResolvedReference
from tinygit.url import RepositoryRef


@dataclass(frozen=True)
class ArchiveTarget:
    """Where to download an archive from and what to call it locally."""

    url: str
    local_filename: str
    format: ArchiveFormat


def locate_archive(
    repo: RepositoryRef,
    reference: ResolvedReference,
    profile: ProviderProfile,
) -> ArchiveTarget:
    """Build the archive download URL and local filename.

    Pure function: no network or filesystem access.

    Args:
        repo: Repository being fetched.
        reference: Tag or branch to fetch.
        profile: Provider profile supplying URL grammar and format.

    Returns:
        ArchiveTarget whose filename is ``{owner}-{repo}-{ref}.{ext}``.
    """
    if reference.kind == ReferenceKind.RELEASE:
        template = profile.release_archive_template
        fmt = profile.release_format
    else:
        template = profile.branch_archive_template
        fmt = profile.branch_format

    url = template.format(ext=fmt.extension, **profile.placeholders(repo, reference.value))
    filename = f"{repo.owner}-{repo.name}-{ref_slug(reference.value)}.{fmt.extension}"
    return ArchiveTarget(url=url, local_filename=filename, format=fmt)
