"""Shared fixtures: in-memory packages and fake site-packages directories."""

from __future__ import annotations

import logging
from collections.abc import Callable, Generator
from pathlib import Path

import pytest

from pkgtree.core.parser import InstalledPackage, parse_requirement


def make_package(
    name: str,
    *requires: str,
    version: str = "1.0",
    extras: tuple[str, ...] = (),
) -> InstalledPackage:
    """InstalledPackage from PEP 508 requirement strings."""
    return InstalledPackage(
        name=name,
        version=version,
        requirements=[parse_requirement(r) for r in requires],
        extras=extras,
    )


def write_dist_info(
    site: Path,
    name: str,
    version: str = "1.0",
    requires: tuple[str, ...] = (),
    extras: tuple[str, ...] = (),
    summary: str = "",
) -> Path:
    """Create <name>-<version>.dist-info/METADATA under site."""
    dist_info = site / f"{name.replace('-', '_')}-{version}.dist-info"
    dist_info.mkdir(parents=True)
    lines = ["Metadata-Version: 2.1", f"Name: {name}", f"Version: {version}"]
    if summary:
        lines.append(f"Summary: {summary}")
    lines += [f"Provides-Extra: {e}" for e in extras]
    lines += [f"Requires-Dist: {r}" for r in requires]
    (dist_info / "METADATA").write_text("\n".join(lines) + "\n")
    return dist_info


@pytest.fixture
def dist_info_factory(tmp_path: Path) -> Callable[..., Path]:
    """Write dist-info directories into tmp_path/site-packages."""
    site = tmp_path / "site-packages"
    site.mkdir()

    def _make(name: str, version: str = "1.0", **kwargs) -> Path:
        write_dist_info(site, name, version, **kwargs)
        return site

    return _make


@pytest.fixture(autouse=True)
def _restore_logging() -> Generator[None, None, None]:
    """Restore root logger state after each test (the CLI reconfigures it)."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    pkg_logger = logging.getLogger("pkgtree")
    pkg_level = pkg_logger.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    pkg_logger.setLevel(pkg_level)
