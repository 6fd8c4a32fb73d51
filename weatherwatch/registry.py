"""Tracked-location registry: the ordered set of locations polled each cycle."""

import logging
from collections.abc import Callable, Iterable, Iterator

logger = logging.getLogger(__name__)


class LocationRegistry:
    """Ordered, unique location names with write-through persistence.

    Names compare case-insensitively; the first spelling added is kept.
    """

    def __init__(
        self,
        names: Iterable[str],
        persist: Callable[[list[str]], None],
    ):
        self._names: list[str] = []
        self._keys: set[str] = set()
        self._persist = persist
        for name in names:
            self._adopt(name)

    @staticmethod
    def normalize(name: str) -> str:
        return (name or "").strip()

    @property
    def names(self) -> list[str]:
        return list(self._names)

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str):
            return False
        return self.normalize(name).casefold() in self._keys

    def __len__(self) -> int:
        return len(self._names)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._names))

    def add(self, name: str) -> bool:
        """Add a location and persist the registry.

        Returns False, without writing, for blank or already tracked names.
        """
        if not self._adopt(name):
            return False
        logger.info("Tracking new location %s", self.normalize(name))
        self._persist(self.names)
        return True

    def merge(self, names: Iterable[str]) -> list[str]:
        """Adopt names persisted elsewhere without writing. Returns the new ones."""
        return [self.normalize(n) for n in names if self._adopt(n)]

    def _adopt(self, name: str) -> bool:
        name = self.normalize(name)
        if not name or name.casefold() in self._keys:
            return False
        self._names.append(name)
        self._keys.add(name.casefold())
        return True
