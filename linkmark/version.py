"""Version reporting for ``linkmark --version``.

The commit comes from the live git checkout when running from source, or
from ``_build_info.py`` written by the hatch build hook in an installed
wheel.
"""

from __future__ import annotations

import importlib.metadata
import subprocess
from pathlib import Path
from typing import NamedTuple, Optional


class BuildInfo(NamedTuple):
    version: Optional[str]
    commit: Optional[str]
    date: Optional[str]
    dirty: bool


def _run_git(args: list[str], cwd: Path) -> Optional[str]:
    try:
        out = subprocess.check_output(["git", *args], cwd=str(cwd), stderr=subprocess.DEVNULL)
    except (subprocess.CalledProcessError, FileNotFoundError, OSError):
        return None
    return out.decode().strip() or None


def _package_version() -> Optional[str]:
    try:
        return importlib.metadata.version("linkmark")
    except importlib.metadata.PackageNotFoundError:
        return None


def _from_git_repo(version: Optional[str]) -> Optional[BuildInfo]:
    here = Path(__file__).resolve().parent
    if _run_git(["rev-parse", "--show-toplevel"], cwd=here) is None:
        return None
    commit = _run_git(["rev-parse", "HEAD"], cwd=here)
    date = _run_git(["show", "-s", "--format=%cI", "HEAD"], cwd=here)
    dirty = bool(_run_git(["status", "--porcelain"], cwd=here))
    return BuildInfo(version=version, commit=commit, date=date, dirty=dirty)


def _from_embedded_file(version: Optional[str]) -> Optional[BuildInfo]:
    # Generated at build time by hatch build hook
    try:
        from . import _build_info  # type: ignore
    except ImportError:
        return None
    commit = getattr(_build_info, "COMMIT", None)
    date = getattr(_build_info, "DATE", None)
    return BuildInfo(version=version, commit=commit, date=date, dirty=False)


def get_build_info() -> BuildInfo:
    version = _package_version()
    for getter in (_from_git_repo, _from_embedded_file):
        info = getter(version)
        if info and (info.commit or info.date):
            return info
    return BuildInfo(version=version, commit=None, date=None, dirty=False)


def get_version_string() -> str:
    info = get_build_info()
    dirty_suffix = "-dirty" if info.dirty else ""
    # Short (7-character) git hashes
    commit = info.commit[:7] if info.commit else "unknown"
    return f"linkmark {info.version or 'unknown'} ({commit}{dirty_suffix} {info.date or 'unknown'})"
