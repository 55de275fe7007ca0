"""Index of installed packages keyed by normalized name."""

from __future__ import annotations

from collections.abc import Iterator

from pkgtree.core.parser import InstalledPackage, normalize_name


class DuplicatePackageError(ValueError):
    """Two installed packages normalize to the same name."""

    def __init__(self, existing: InstalledPackage, duplicate: InstalledPackage) -> None:
        super().__init__(
            f"Duplicate package {existing.key}: "
            f"{existing.name} v{existing.version} and {duplicate.name} v{duplicate.version}"
        )
        self.existing = existing
        self.duplicate = duplicate


class PackageIndex:
    """Normalized name -> package, iterated in insertion order."""

    def __init__(self) -> None:
        self._by_name: dict[str, InstalledPackage] = {}

    def add(self, package: InstalledPackage) -> None:
        """Add a package; raise DuplicatePackageError and keep the first one on a name clash."""
        key = package.key
        existing = self._by_name.get(key)
        if existing is not None:
            raise DuplicatePackageError(existing, package)
        self._by_name[key] = package

    def get(self, name: str) -> InstalledPackage | None:
        return self._by_name.get(normalize_name(name))

    def __getitem__(self, name: str) -> InstalledPackage:
        return self._by_name[normalize_name(name)]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and normalize_name(name) in self._by_name

    def __iter__(self) -> Iterator[InstalledPackage]:
        return iter(self._by_name.values())

    def __len__(self) -> int:
        return len(self._by_name)

    def names(self) -> list[str]:
        """Normalized names in insertion order."""
        return list(self._by_name)
