from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable

from wirespec.repo.ignore import should_ignore_dir, should_ignore_file

DESCRIPTION_SUFFIX = ".endpoint.json"


def scan_description_files(root: Path, max_files: int | None = None) -> list[str]:
    """
    Absolute paths (as strings) of endpoint description files under root,
    sorted for deterministic output.
    """
    out: list[str] = []
    for dirpath, dirs, files in os.walk(root):
        root_p = Path(dirpath)

        # prune ignored dirs
        dirs[:] = sorted(d for d in dirs if not should_ignore_dir(root_p / d))

        for f in sorted(files):
            if f.endswith(DESCRIPTION_SUFFIX) and not should_ignore_file(root_p / f):
                out.append(str((root_p / f).resolve()))
                if max_files is not None and len(out) >= max_files:
                    return out
    return out


def expand_inputs(paths: Iterable[Path]) -> list[str]:
    """Files are taken as given; directories are scanned."""
    out: list[str] = []
    seen: set[str] = set()
    for p in paths:
        found = scan_description_files(p) if p.is_dir() else [str(p.resolve())]
        for f in found:
            if f not in seen:
                seen.add(f)
                out.append(f)
    return out
