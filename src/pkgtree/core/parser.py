"""Parse installed distribution metadata into package and requirement records."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from functools import lru_cache
from importlib.metadata import Distribution

from packaging.markers import InvalidMarker, Marker, default_environment
from packaging.requirements import InvalidRequirement
from packaging.requirements import Requirement as PEP508Requirement
from packaging.utils import canonicalize_name

logger = logging.getLogger(__name__)

MarkerEvaluator = Callable[[str, frozenset[str]], bool]


class MetadataError(Exception):
    """The requirement list of an installed package could not be read."""

    def __init__(self, package: str, reason: str) -> None:
        super().__init__(f"Failed to read metadata for {package}: {reason}")
        self.package = package
        self.reason = reason


def normalize_name(name: str) -> str:
    """PEP 503 normalized form used as package identity."""
    return canonicalize_name(name)


@dataclass(frozen=True)
class Requirement:
    """One declared dependency of a package."""

    name: str
    marker: str | None = None
    extras: frozenset[str] = frozenset()
    specifier: str = ""

    @property
    def key(self) -> str:
        return normalize_name(self.name)


@dataclass
class InstalledPackage:
    """Metadata of one installed distribution."""

    name: str
    version: str
    requirements: list[Requirement] | None = field(default_factory=list)
    extras: tuple[str, ...] = ()
    location: str = ""
    summary: str = ""
    # Set when requirements is None
    error: str | None = None

    def __post_init__(self) -> None:
        # Keep declaration order, drop repeats
        self.extras = tuple(dict.fromkeys(self.extras))

    @property
    def key(self) -> str:
        return normalize_name(self.name)

    def requires(self) -> list[Requirement]:
        """Return the declared requirements, or raise MetadataError if unreadable."""
        if self.requirements is None:
            raise MetadataError(self.name, self.error or "requirements unavailable")
        return self.requirements


def parse_requirement(text: str) -> Requirement:
    """
    Parse a PEP 508 requirement string (a Requires-Dist value).

    Raises packaging's InvalidRequirement for malformed input.
    """
    req = PEP508Requirement(text)
    return Requirement(
        name=req.name,
        marker=str(req.marker) if req.marker is not None else None,
        extras=frozenset(normalize_name(e) for e in req.extras),
        specifier=str(req.specifier),
    )


def package_from_distribution(dist: Distribution) -> InstalledPackage | None:
    """
    Build an InstalledPackage from an importlib.metadata distribution.

    Returns None if the distribution has no name (broken install).
    A distribution whose Requires-Dist cannot be read or parsed is still
    returned, with requirements=None and the reason in error.
    """
    metadata = dist.metadata
    name = metadata.get("Name") if metadata is not None else None
    if not name:
        return None
    version = metadata.get("Version") or ""
    extras = tuple(normalize_name(e) for e in (metadata.get_all("Provides-Extra") or []))
    location = ""
    try:
        location = str(dist.locate_file(""))
    except (OSError, NotImplementedError):
        pass

    try:
        raw = dist.requires or []
        requirements: list[Requirement] | None = [parse_requirement(r) for r in raw]
        error = None
    except (InvalidRequirement, OSError) as e:
        logger.debug("Unreadable requirements for %s: %s", name, e)
        requirements = None
        error = str(e)

    return InstalledPackage(
        name=name,
        version=version,
        requirements=requirements,
        extras=extras,
        location=location,
        summary=metadata.get("Summary") or "",
        error=error,
    )


@lru_cache(maxsize=1024)
def _parse_marker(marker: str) -> Marker:
    return Marker(marker)


def marker_evaluator(
    environment: Mapping[str, str] | None = None,
) -> MarkerEvaluator:
    """
    Return an evaluate(marker, active_extras) function.

    environment overrides keys of packaging's default marker environment
    (e.g. {"python_version": "3.9"}). With no active extras the marker is
    evaluated with extra == ""; otherwise it holds if any single extra
    satisfies it.
    """
    env: dict[str, str] = dict(default_environment())
    if environment:
        env.update(environment)

    def evaluate(marker: str, active_extras: frozenset[str] = frozenset()) -> bool:
        try:
            parsed = _parse_marker(marker)
        except InvalidMarker as e:
            logger.warning("Ignoring requirement with invalid marker %r: %s", marker, e)
            return False
        if not active_extras:
            return parsed.evaluate({**env, "extra": ""})
        return any(parsed.evaluate({**env, "extra": extra}) for extra in sorted(active_extras))

    return evaluate


def python_version_environment(python_version: str) -> dict[str, str]:
    """Marker environment overrides for a target X.Y (or X.Y.Z) interpreter version."""
    parts = python_version.strip().split(".")
    short = ".".join(parts[:2])
    full = python_version.strip() if len(parts) > 2 else f"{short}.0"
    return {"python_version": short, "python_full_version": full}


evaluate_marker = marker_evaluator()
