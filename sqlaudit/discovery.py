"""Candidate source file discovery."""

import fnmatch
import os
from pathlib import Path

SKIP_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".sqlaudit",
    ".venv",
    "venv",
    "node_modules",
    "blib",
    "__pycache__",
}

# Carton installs dependencies under local/lib/perl5
CARTON_LOCAL = "local"


def _excluded(rel_path: str, exclude_patterns: list[str]) -> bool:
    return any(fnmatch.fnmatch(rel_path, pattern) for pattern in exclude_patterns)


def _pruned(dirpath: str, name: str) -> bool:
    if name in SKIP_DIRS:
        return True
    return name == CARTON_LOCAL and os.path.isdir(os.path.join(dirpath, name, "lib", "perl5"))


def discover_files(
    root: Path | str,
    extensions: list[str] | tuple[str, ...] = (".pl",),
    exclude_patterns: list[str] | None = None,
) -> list[Path]:
    """Recursively list source files under root, sorted by relative path.

    Nothing is opened or stat'ed here; unreadable and oversized files are
    reported by the runner when it reads them.

    Args:
        root: Directory to walk (a single file is returned as-is)
        extensions: Suffixes to keep, compared case-insensitively
        exclude_patterns: fnmatch globs matched against root-relative posix paths

    Returns:
        Absolute file paths
    """
    root = Path(root).resolve()
    if root.is_file():
        return [root]

    wanted = {ext.lower() for ext in extensions}
    exclude_patterns = exclude_patterns or []
    found = []

    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if not _pruned(dirpath, d))
        for filename in filenames:
            path = Path(dirpath) / filename
            if path.suffix.lower() not in wanted:
                continue
            if _excluded(path.relative_to(root).as_posix(), exclude_patterns):
                continue
            found.append(path)

    return sorted(found, key=lambda p: p.relative_to(root).as_posix())
