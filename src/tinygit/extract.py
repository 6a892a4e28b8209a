"""Archive extraction using external tools.

tar.gz archives are unpacked with ``tar`` and zip archives with ``unzip``.
The tools must be on PATH; a missing tool surfaces as an extraction
failure. Child processes run without a timeout, so a hung tool hangs the
caller.
"""

import shutil
import subprocess
import tempfile
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from tinygit.providers import ArchiveFormat

# Exit status reported when the tool itself cannot be started
COMMAND_NOT_FOUND = 127


class ExtractionFailedError(Exception):
    """Raised when the extraction tool exits non-zero or cannot be run."""

    def __init__(self, archive: Path, returncode: int, stderr: str) -> None:
        self.archive = archive
        self.returncode = returncode
        self.stderr = stderr
        detail = stderr.strip() or "no output"
        super().__init__(
            f"Extracting {archive.name} failed (exit code {returncode}): {detail}"
        )


@dataclass
class CommandResult:
    """Outcome of running an external command."""

    returncode: int
    stderr: str

    @property
    def ok(self) -> bool:
        """True if the command exited with status 0."""
        return self.returncode == 0


def run_command(cmd: list[str]) -> CommandResult:
    """Run a command to completion and capture its diagnostics.

    Args:
        cmd: Program and arguments.

    Returns:
        CommandResult with the exit status and captured stderr. A program
        that cannot be found yields exit status 127.
    """
    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            check=False,
        )
    except FileNotFoundError:
        return CommandResult(returncode=COMMAND_NOT_FOUND, stderr=f"{cmd[0]}: command not found")
    except OSError as e:
        return CommandResult(returncode=COMMAND_NOT_FOUND, stderr=f"{cmd[0]}: {e}")
    return CommandResult(returncode=result.returncode, stderr=result.stderr)


def _tar_command(archive: Path, target_dir: Path, strip_components: int) -> list[str]:
    cmd = ["tar", "-xzf", str(archive), "-C", str(target_dir)]
    if strip_components:
        cmd.append(f"--strip-components={strip_components}")
    return cmd


def _unzip_command(archive: Path, target_dir: Path, strip_components: int) -> list[str]:
    # unzip has no strip option; extract_archive flattens afterwards
    return ["unzip", "-q", "-o", str(archive), "-d", str(target_dir)]


@dataclass(frozen=True)
class Extractor:
    """How to unpack one archive format."""

    build_command: Callable[[Path, Path, int], list[str]]
    strips_natively: bool


EXTRACTORS: dict[ArchiveFormat, Extractor] = {
    ArchiveFormat.TAR_GZ: Extractor(build_command=_tar_command, strips_natively=True),
    ArchiveFormat.ZIP: Extractor(build_command=_unzip_command, strips_natively=False),
}


def extract_archive(
    archive: Path,
    target_dir: Path,
    fmt: ArchiveFormat,
    strip_components: int = 0,
) -> None:
    """Unpack archive into target_dir.

    The archive is unpacked into a staging directory beside target_dir and
    moved in only once the tool succeeds, so a failed extraction adds
    nothing to target_dir.

    Args:
        archive: Archive file to unpack.
        target_dir: Destination directory, created if missing.
        fmt: Archive format; selects the tool.
        strip_components: Leading path components to drop. Provider archives
            wrap everything in one ``{repo}-{ref}/`` folder, so 1 unpacks the
            tree directly into target_dir.

    Raises:
        ExtractionFailedError: If the tool fails or the archive does not have
            the expected single top-level folder.
    """
    extractor = EXTRACTORS[fmt]
    target_dir.mkdir(parents=True, exist_ok=True)
    native_strip = strip_components if extractor.strips_natively else 0

    # Unpack next to the target; nothing reaches target_dir unless the tool succeeds
    with tempfile.TemporaryDirectory(dir=target_dir.parent, prefix=".tinygit-") as tmp:
        staging = Path(tmp)
        result = run_command(extractor.build_command(archive, staging, native_strip))
        if not result.ok:
            raise ExtractionFailedError(archive, result.returncode, result.stderr)
        root = _strip_root(archive, staging, strip_components - native_strip)
        _move_contents(root, target_dir)


def _strip_root(archive: Path, staging: Path, strip_components: int) -> Path:
    """Descend through leading single folders of the unpacked tree."""
    root = staging
    for _ in range(strip_components):
        entries = list(root.iterdir())
        if len(entries) != 1 or not entries[0].is_dir():
            msg = f"expected a single top-level folder, found {len(entries)} entries"
            raise ExtractionFailedError(archive, 1, msg)
        root = entries[0]
    return root


def _move_contents(root: Path, target_dir: Path) -> None:
    """Move every entry of root into target_dir, replacing same-named entries."""
    for entry in root.iterdir():
        destination = target_dir / entry.name
        if destination.is_dir() and not destination.is_symlink():
            shutil.rmtree(destination)
        elif destination.exists() or destination.is_symlink():
            destination.unlink()
        shutil.move(str(entry), str(destination))
