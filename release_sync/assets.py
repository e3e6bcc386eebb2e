"""Release asset discovery and reading.

Turns user-supplied path patterns into the ordered list of files to attach
to a release, and reads a single asset for upload. Both functions are
best-effort: problems are reported as warnings and never raised.
"""

import glob
import os
from dataclasses import dataclass
from pathlib import Path

from rich.console import Console
from rich.markup import escape

console = Console(stderr=True)


@dataclass(frozen=True)
class FileInfo:
    """Content of one asset file, ready to upload."""

    name: str
    size: int
    content: bytes


def split_patterns(raw: str | None) -> list[str]:
    """Split whitespace/newline separated asset patterns."""
    if not raw:
        return []
    return [item for item in raw.split() if item]


def resolve_asset_files(
    raw: str | None,
    cwd: Path | None = None,
    verbose: bool = False,
) -> list[Path]:
    """Resolve asset patterns to absolute paths of existing files.

    Patterns support glob syntax including recursive ``**``. Relative
    patterns are resolved against cwd. Matches of each pattern are sorted,
    patterns keep their input order, and a path matched twice is kept at
    its first position.

    Args:
        raw: Whitespace separated patterns (None or empty means no assets)
        cwd: Base directory for relative patterns (defaults to cwd)
        verbose: Print each resolved file

    Returns:
        Deduplicated list of absolute file paths
    """
    patterns = split_patterns(raw)
    if not patterns:
        return []

    base = (cwd or Path.cwd()).resolve()
    resolved: list[Path] = []
    seen: set[Path] = set()

    for pattern in patterns:
        matches = sorted(
            glob.glob(pattern, root_dir=base, recursive=True),
        )
        files = []
        for match in matches:
            # Symlinks are not followed so an asset keeps the name it was given
            candidate = Path(os.path.abspath(base / match))
            if candidate.is_file():
                files.append(candidate)

        if not files:
            console.print(f"[yellow]Warning:[/yellow] No files match asset pattern: {escape(pattern)}")
            continue

        for path in files:
            if path in seen:
                if verbose:
                    console.print(f"[dim]Skipping duplicate asset: {escape(str(path))}[/dim]")
                continue
            # The file may vanish between globbing and here
            if not path.exists():
                console.print(f"[yellow]Warning:[/yellow] Asset file does not exist: {escape(str(path))}")
                continue
            seen.add(path)
            resolved.append(path)
            if verbose:
                console.print(f"[dim]Asset: {escape(str(path))}[/dim]")

    return resolved


def get_file_info(path: Path) -> FileInfo | None:
    """Read an asset file.

    Args:
        path: File to read

    Returns:
        FileInfo with base name, size and bytes, or None if the file
        cannot be read
    """
    try:
        content = Path(path).read_bytes()
    except OSError as e:
        console.print(
            f"[yellow]Warning:[/yellow] Cannot read asset {escape(str(path))}: {type(e).__name__}: {escape(str(e))}"
        )
        return None
    return FileInfo(name=Path(path).name, size=len(content), content=content)
