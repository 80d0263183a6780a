"""Human-readable locations such as ``Garage › Shelf Unit › Bin A › Bag 1``."""

from __future__ import annotations

from typing import Any, Mapping

from ..crud.containers import DEFAULT_MAX_DEPTH
from .hierarchy import parent_chain

PATH_SEPARATOR = " › "


def item_full_path(
    item: Any,
    *,
    places: Mapping[str, Any],
    zones: Mapping[str, Any],
    containers: Mapping[str, Any],
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> str:
    """Place, zone and nested container names leading to ``item``.

    Missing links degrade the result instead of failing: without the place
    the path starts at the zone, without the zone only container names are
    returned, and an unknown container yields an empty string.
    """

    container = containers.get(item.container_id)
    if container is None:
        return ""
    names = [entry.name for entry in parent_chain(container.id, containers.get, max_depth=max_depth)]
    zone = zones.get(container.zone_id)
    if zone is None:
        return PATH_SEPARATOR.join(names)
    place = places.get(zone.place_id)
    if place is None:
        return PATH_SEPARATOR.join([zone.name, *names])
    return PATH_SEPARATOR.join([place.name, zone.name, *names])


def index_by_id(entities: Any) -> dict[str, Any]:
    return {entity.id: entity for entity in entities}
