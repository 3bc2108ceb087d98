"""
In-memory package/hours repository.

In production, this would fetch the package balance from the booking API
at request time. The core never refreshes it mid-validation.
"""

import logging
from typing import Iterable, Optional

from carebook.schemas.booking_schema import Package
from carebook.tools.contracts import RepositoryError

logger = logging.getLogger(__name__)


class InMemoryPackageRepository:
    def __init__(self, packages: Optional[Iterable[Package]] = None) -> None:
        self._packages: dict[str, Package] = {p.id: p for p in packages or []}

    def add(self, package: Package) -> None:
        self._packages[package.id] = package

    async def get_package(self, package_id: str) -> Package:
        try:
            return self._packages[package_id]
        except KeyError:
            raise RepositoryError(
                f"We couldn't find package {package_id}. Please refresh and try again."
            ) from None

    def reset(self) -> None:
        """Clear all packages. Used by test fixtures for isolation."""
        self._packages.clear()
