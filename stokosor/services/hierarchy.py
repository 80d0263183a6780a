"""Tree queries over the cached containers.

Nothing here touches the database: answers are only as complete as the
container cache, so fetch the zone (or everything) first.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Callable, Optional, Protocol, TypeVar

from ..crud.containers import DEFAULT_MAX_DEPTH, ContainerRepository
from ..schemas.container import ContainerOut

logger = logging.getLogger(__name__)


class _Linked(Protocol):
    id: str
    parent_container_id: Optional[str]


C = TypeVar("C", bound=_Linked)


def parent_chain(
    container_id: str,
    lookup: Callable[[str], Optional[C]],
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> list[C]:
    """Follow parent links from ``container_id`` and return them root first.

    The walk is bounded by a visited set and ``max_depth`` so corrupted data
    with a loop still terminates.
    """

    path: list[C] = []
    seen: set[str] = set()
    current = lookup(container_id)
    while current is not None:
        if current.id in seen or len(path) >= max_depth:
            logger.warning("Container %s has a cyclic or too deep parent chain", container_id)
            break
        seen.add(current.id)
        path.insert(0, current)
        if not current.parent_container_id:
            break
        current = lookup(current.parent_container_id)
    return path


class ContainerHierarchy:
    def __init__(self, containers: ContainerRepository, *, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        self.containers = containers
        self.max_depth = max_depth

    def root_containers(self, zone_id: str) -> list[ContainerOut]:
        return self.containers.cache.filter(
            lambda container: container.zone_id == zone_id and not container.parent_container_id
        )

    def children(self, container_id: str) -> list[ContainerOut]:
        return self.containers.cache.filter(lambda container: container.parent_container_id == container_id)

    def ancestor_path(self, container_id: str) -> list[ContainerOut]:
        """Containers from the root down to ``container_id`` inclusive.

        Stops early, with a warning, if the parent links loop or run deeper
        than ``max_depth``. A parent missing from the cache ends the path at
        the deepest known ancestor.
        """

        return parent_chain(container_id, self.containers.get, max_depth=self.max_depth)

    def descendants(self, container_id: str) -> list[ContainerOut]:
        """Every container nested below ``container_id``, breadth first."""

        found: list[ContainerOut] = []
        seen = {container_id}
        queue = deque([container_id])
        while queue:
            for child in self.children(queue.popleft()):
                if child.id in seen:
                    continue
                seen.add(child.id)
                found.append(child)
                queue.append(child.id)
        return found

    def would_create_cycle(self, container_id: str, new_parent_id: str | None) -> bool:
        if new_parent_id is None:
            return False
        if new_parent_id == container_id:
            return True
        return any(container.id == new_parent_id for container in self.descendants(container_id))
