"""Placeholder repository metadata for cloned trees.

Creates a ``.git`` directory with the usual layout so tools that look for
one find it. There is no object database, index, or history: the result
is cosmetic and is not a usable git repository.
"""

from pathlib import Path

METADATA_DIR = ".git"

SCAFFOLD_DIRS = ("objects", "refs/heads", "refs/tags", "info", "hooks")

HEAD_CONTENT = "ref: refs/heads/main\n"

CONFIG_CONTENT = """\
[core]
\trepositoryformatversion = 0
\tfilemode = true
\tbare = false
\tlogallrefupdates = true
"""

DESCRIPTION_CONTENT = "Unnamed repository; created by tinygit from a source archive.\n"


class ScaffoldFailedError(Exception):
    """Raised when the metadata directory cannot be created."""


def init_scaffold(target_dir: Path) -> Path:
    """Create placeholder ``.git`` metadata inside target_dir.

    Args:
        target_dir: Working tree root, created if missing.

    Returns:
        Path to the created metadata directory.

    Raises:
        ScaffoldFailedError: On any filesystem error, including an existing
            ``.git`` entry that is not a directory.
    """
    git_dir = target_dir / METADATA_DIR
    try:
        for sub in SCAFFOLD_DIRS:
            (git_dir / sub).mkdir(parents=True, exist_ok=True)
        (git_dir / "HEAD").write_text(HEAD_CONTENT)
        (git_dir / "config").write_text(CONFIG_CONTENT)
        (git_dir / "description").write_text(DESCRIPTION_CONTENT)
    except OSError as e:
        msg = f"Failed to create {git_dir}: {e}"
        raise ScaffoldFailedError(msg) from e
    return git_dir
