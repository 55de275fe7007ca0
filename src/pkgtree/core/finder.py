"""Discover installed Python distributions from site-packages directories."""

from __future__ import annotations

import logging
import os
import sys
from importlib.metadata import distributions
from pathlib import Path

from pkgtree.core.parser import InstalledPackage, normalize_name, package_from_distribution

logger = logging.getLogger(__name__)

PATH_ENV_VAR = "PKGTREE_PATH"


def _env_paths(env_var: str) -> list[Path]:
    """Split an environment variable by os.pathsep and return existing Paths."""
    value = os.environ.get(env_var, "")
    if not value:
        return []
    return [Path(p).resolve() for p in value.split(os.pathsep) if p.strip() and Path(p).exists()]


def _venv_site_packages(venv: Path) -> list[Path]:
    """site-packages directories of a virtual environment (POSIX and Windows layouts)."""
    found = sorted(venv.glob("lib/python*/site-packages"))
    windows = venv / "Lib" / "site-packages"
    if windows.is_dir():
        found.append(windows)
    return [p.resolve() for p in found if p.is_dir()]


def site_package_dirs(paths: list[Path] | None = None) -> list[Path]:
    """
    Directories to scan for installed distributions, deduplicated.

    Searches in order, using the first that yields anything:
    1. Explicit paths.
    2. PKGTREE_PATH (os.pathsep separated).
    3. The site-packages of VIRTUAL_ENV.
    4. The running interpreter's sys.path.
    """
    candidates: list[Path] = []
    if paths:
        candidates = [Path(p).resolve() for p in paths]
    if not candidates:
        candidates = _env_paths(PATH_ENV_VAR)
    if not candidates and os.environ.get("VIRTUAL_ENV"):
        candidates = _venv_site_packages(Path(os.environ["VIRTUAL_ENV"]))
    if not candidates:
        candidates = [Path(p).resolve() for p in sys.path if p]

    seen: set[Path] = set()
    out: list[Path] = []
    for candidate in candidates:
        if candidate in seen or not candidate.is_dir():
            continue
        seen.add(candidate)
        out.append(candidate)
    return out


def list_installed_packages(paths: list[Path] | None = None) -> list[InstalledPackage]:
    """
    List installed packages in discovery order.

    Directories are scanned in site_package_dirs order; within a directory,
    packages are ordered by normalized name so output is reproducible.
    The same name found in two directories is returned twice; the graph
    builder reports it.
    """
    packages: list[InstalledPackage] = []
    for directory in site_package_dirs(paths):
        found: list[InstalledPackage] = []
        for dist in distributions(path=[str(directory)]):
            package = package_from_distribution(dist)
            if package is None:
                logger.debug("Skipping nameless distribution in %s", directory)
                continue
            found.append(package)
        found.sort(key=lambda p: normalize_name(p.name))
        logger.debug("Found %d package(s) in %s", len(found), directory)
        packages.extend(found)
    return packages


def find_package(name: str, paths: list[Path] | None = None) -> InstalledPackage | None:
    """Return the first installed package matching name (any spelling), or None."""
    key = normalize_name(name)
    for package in list_installed_packages(paths):
        if package.key == key:
            return package
    return None
