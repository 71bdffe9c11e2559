"""
File system traversal: walk directories and collect files the detector supports.

A file is collected when its extension maps to a supported language in the
language table (JavaScript, Python, shell, Ruby, Groovy). Common build,
dependency and tooling directories are skipped.

Typical usage:
    from pathlib import Path
    from detector.traversal import find_source_files

    sources = find_source_files(Path("./my_project"))

    # Custom ignore set
    sources = find_source_files(Path("./my_project"), ignore_dirs={"dist", "vendor"})
"""

import logging
from pathlib import Path
from typing import Callable, Optional, Set

from detector.languages import is_supported_file

logger = logging.getLogger(__name__)

# Default directories to ignore during traversal
DEFAULT_IGNORE_DIRS: Set[str] = {
    # Build and distribution directories
    "build",
    "dist",
    "out",
    "coverage",

    # Dependency and package directories
    "node_modules",
    "bower_components",
    "vendor",
    "third_party",
    ".bundle",
    ".gradle",

    # Version control
    ".git",
    ".svn",
    ".hg",

    # IDE and editor directories
    ".vscode",
    ".idea",

    # Python virtual environments
    "venv",
    ".venv",
    "env",

    # Cache directories
    "__pycache__",
    ".cache",
    ".pytest_cache",
}


def should_ignore_directory(dir_path: Path, ignore_dirs: Set[str]) -> bool:
    """Only the directory name is compared, not the full path."""
    return dir_path.name in ignore_dirs


def find_source_files(
    root: Path,
    ignore_dirs: Optional[Set[str]] = None,
    follow_symlinks: bool = False,
    filter_fn: Optional[Callable[[Path], bool]] = None,
) -> list[Path]:
    """
    Recursively find every supported source file under root.

    Args:
        root: Root directory to start traversal from.
        ignore_dirs: Directory names to skip. If None, uses DEFAULT_IGNORE_DIRS.
        follow_symlinks: If False (default), symlinks are skipped.
        filter_fn: Optional extra predicate; only files for which it returns
                   True are kept.

    Returns:
        Sorted list of matching files.

    Raises:
        FileNotFoundError: root does not exist.
        NotADirectoryError: root is not a directory.

    Permission errors on subdirectories are logged and traversal continues.
    """
    if ignore_dirs is None:
        ignore_dirs = DEFAULT_IGNORE_DIRS

    root = root.resolve()

    if not root.exists():
        logger.error("Root directory does not exist: %s", root)
        raise FileNotFoundError(f"Root directory does not exist: {root}")

    if not root.is_dir():
        logger.error("Root path is not a directory: %s", root)
        raise NotADirectoryError(f"Root path is not a directory: {root}")

    logger.info("Starting traversal from: %s", root)

    collected_files: list[Path] = []

    def _walk_directory(current_dir: Path) -> None:
        try:
            for entry in current_dir.iterdir():
                if entry.is_symlink() and not follow_symlinks:
                    logger.debug("Skipping symlink: %s", entry)
                    continue

                if entry.is_dir():
                    if should_ignore_directory(entry, ignore_dirs):
                        logger.debug("Ignoring directory: %s", entry)
                        continue
                    _walk_directory(entry)

                elif entry.is_file() and is_supported_file(str(entry)):
                    if filter_fn is not None and not filter_fn(entry):
                        logger.debug("Filtered out by custom filter: %s", entry)
                        continue
                    collected_files.append(entry)

        except OSError as e:
            logger.warning("Error accessing directory %s: %s", current_dir, e)

    _walk_directory(root)
    collected_files.sort()

    logger.info(
        "Traversal complete: found %d source file(s) in %s",
        len(collected_files),
        root,
    )
    return collected_files
