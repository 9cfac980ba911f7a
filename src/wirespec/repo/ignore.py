from __future__ import annotations

from pathlib import Path

# directories never holding endpoint descriptions
SKIP_DIRS = {
    ".git",
    ".venv",
    "venv",
    "__pycache__",
    "node_modules",
    "dist",
    "build",
    ".pytest_cache",
}


def should_ignore_dir(dir_path: Path) -> bool:
    name = dir_path.name
    return name in SKIP_DIRS or (name.startswith(".") and name not in (".", ".."))


def should_ignore_file(file_path: Path) -> bool:
    # editor backups / lock files
    name = file_path.name
    return name.startswith((".#", "~")) or name.endswith("~")
