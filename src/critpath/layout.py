"""Layered grid layout for the dependency network."""

from __future__ import annotations

from collections.abc import Iterable, Mapping


def assign_layout(
    ids: Iterable[str],
    early_start: Mapping[str, int],
) -> dict[str, tuple[int, int]]:
    """Return {id: (layer, lane)}.

    Nodes sharing an earliest start share a layer; layers are numbered by
    ascending earliest start. *ids* must be in input order, which fixes the
    lane order inside each layer.
    """
    layers: dict[int, list[str]] = {}
    for nid in ids:
        layers.setdefault(early_start[nid], []).append(nid)

    positions: dict[str, tuple[int, int]] = {}
    for layer, es in enumerate(sorted(layers)):
        for lane, nid in enumerate(layers[es]):
            positions[nid] = (layer, lane)
    return positions
