"""Tests for repository URL parsing."""

import pytest

from tinygit.url import (
    MalformedURLError,
    Provider,
    RepositoryRef,
    UnsupportedProviderError,
    parse_repo_url,
)


class TestParseRepoUrl:
    """Tests for parse_repo_url."""

    @pytest.mark.parametrize(
        ("host", "provider"),
        [
            ("github.com", Provider.GITHUB),
            ("gitlab.com", Provider.GITLAB),
            ("codeberg.org", Provider.CODEBERG),
        ],
    )
    def test_known_hosts_map_to_providers(self, host: str, provider: Provider) -> None:
        """Each supported host yields its provider, owner, and name."""
        # When
        repo = parse_repo_url(f"https://{host}/acme/widget")

        # Then
        assert repo == RepositoryRef(
            provider=provider,
            owner="acme",
            name="widget",
            origin=f"https://{host}",
        )

    @pytest.mark.parametrize("host", ["github.com", "gitlab.com", "codeberg.org"])
    def test_git_suffix_is_immaterial(self, host: str) -> None:
        """URLs with and without .git parse to identical refs."""
        # When
        plain = parse_repo_url(f"https://{host}/acme/widget")
        suffixed = parse_repo_url(f"https://{host}/acme/widget.git")

        # Then
        assert plain == suffixed
        assert suffixed.name == "widget"

    def test_trailing_slash_and_extra_segments_ignored(self) -> None:
        """Path segments after the repository name do not leak into the name."""
        # When
        slash = parse_repo_url("https://github.com/acme/widget/")
        tree = parse_repo_url("https://github.com/acme/widget/tree/main/src")

        # Then
        assert slash.name == "widget"
        assert tree.name == "widget"

    def test_surrounding_whitespace_ignored(self) -> None:
        """Leading and trailing whitespace is stripped before parsing."""
        # When
        repo = parse_repo_url("  https://codeberg.org/acme/widget.git\n")

        # Then
        assert repo.owner == "acme"
        assert repo.name == "widget"

    def test_only_trailing_git_suffix_is_stripped(self) -> None:
        """A name that merely contains '.git' keeps it."""
        # When
        repo = parse_repo_url("https://github.com/acme/widget.github.io")

        # Then
        assert repo.name == "widget.github.io"

    def test_display_name(self) -> None:
        """display_name is owner/name."""
        # When
        repo = parse_repo_url("https://gitlab.com/acme/widget")

        # Then
        assert repo.display_name == "acme/widget"

    @pytest.mark.parametrize(
        "url",
        [
            "github.com/acme/widget",
            "acme/widget",
            "",
        ],
    )
    def test_missing_scheme_is_malformed(self, url: str) -> None:
        """A URL without :// is rejected."""
        with pytest.raises(MalformedURLError, match="://"):
            parse_repo_url(url)

    def test_missing_path_is_malformed(self) -> None:
        """A URL with no path after the host is rejected."""
        with pytest.raises(MalformedURLError, match="path"):
            parse_repo_url("https://github.com")

    def test_missing_repo_segment_is_malformed(self) -> None:
        """A URL with an owner but no repository is rejected."""
        with pytest.raises(MalformedURLError, match="repository name"):
            parse_repo_url("https://github.com/acme")

    @pytest.mark.parametrize(
        "url",
        [
            "https://github.com//widget",
            "https://github.com/acme/",
            "https://github.com/acme/.git",
        ],
    )
    def test_empty_owner_or_name_is_malformed(self, url: str) -> None:
        """Empty owner or name segments are rejected."""
        with pytest.raises(MalformedURLError, match="Empty"):
            parse_repo_url(url)

    def test_unknown_host_is_unsupported(self) -> None:
        """Hosts outside the known set fail by default."""
        # When/Then
        with pytest.raises(UnsupportedProviderError) as exc_info:
            parse_repo_url("https://git.example.org/acme/widget")

        assert exc_info.value.host == "git.example.org"
        assert "github.com" in str(exc_info.value)

    def test_host_match_is_exact(self) -> None:
        """Subdomains and ports of known hosts are not accepted."""
        with pytest.raises(UnsupportedProviderError):
            parse_repo_url("https://www.github.com/acme/widget")
        with pytest.raises(UnsupportedProviderError):
            parse_repo_url("https://github.com:443/acme/widget")

    def test_unknown_host_allowed_as_generic(self) -> None:
        """With allow_generic, unknown hosts become generic providers."""
        # When
        repo = parse_repo_url("http://git.example.org/acme/widget.git", allow_generic=True)

        # Then
        assert repo.provider == Provider.GENERIC
        assert repo.origin == "http://git.example.org"
        assert repo.name == "widget"

    def test_known_host_not_generic_when_allowed(self) -> None:
        """allow_generic does not downgrade known hosts."""
        # When
        repo = parse_repo_url("https://github.com/acme/widget", allow_generic=True)

        # Then
        assert repo.provider == Provider.GITHUB

    def test_repository_ref_is_immutable(self) -> None:
        """RepositoryRef cannot be modified after parsing."""
        # Given
        repo = parse_repo_url("https://github.com/acme/widget")

        # When/Then
        with pytest.raises(AttributeError):
            repo.name = "other"  # type: ignore[misc]
