from __future__ import annotations

import math
from typing import Any, Dict, List, Optional, Tuple

from pygame.math import Vector3

CellKey = Tuple[int, int, int]


class SpatialGrid:
    """Uniform 3D bucket grid answering radius queries over indexed items.

    Items must expose a ``position`` attribute. Each cell keeps its items in
    insertion order so queries return neighbors in a stable order.
    """

    def __init__(self, cell_size: float) -> None:
        if cell_size <= 0:
            raise ValueError(f"cell_size must be positive, got {cell_size}")
        self._cell_size = cell_size
        self._cells: Dict[CellKey, Dict[int, Any]] = {}
        self._count = 0

    @property
    def cell_size(self) -> float:
        return self._cell_size

    def __len__(self) -> int:
        return self._count

    def clear(self) -> None:
        self._cells.clear()
        self._count = 0

    def occupied_cells(self) -> int:
        return len(self._cells)

    def upsert(self, item_id: int, item: Any, previous_handle: Optional[CellKey] = None) -> CellKey:
        key = self._cell_key(item.position)
        if previous_handle is not None:
            if previous_handle == key:
                bucket = self._cells.get(key)
                if bucket is not None and item_id in bucket:
                    bucket[item_id] = item
                    return key
            self._discard(item_id, previous_handle)
        bucket = self._cells.get(key)
        if bucket is None:
            bucket = {}
            self._cells[key] = bucket
        if item_id not in bucket:
            self._count += 1
        bucket[item_id] = item
        return key

    def remove(self, item_id: int, handle: CellKey) -> None:
        self._discard(item_id, handle)

    def query_radius(self, point: Vector3, radius: float, exclude_id: Optional[int] = None) -> List[Any]:
        found: List[Any] = []
        if radius < 0:
            return found
        cell = self._cell_size
        radius_sq = radius * radius
        px = point.x
        py = point.y
        pz = point.z
        min_x = math.floor((px - radius) / cell)
        max_x = math.floor((px + radius) / cell)
        min_y = math.floor((py - radius) / cell)
        max_y = math.floor((py + radius) / cell)
        min_z = math.floor((pz - radius) / cell)
        max_z = math.floor((pz + radius) / cell)
        cells = self._cells
        append = found.append

        for cx in range(min_x, max_x + 1):
            for cy in range(min_y, max_y + 1):
                for cz in range(min_z, max_z + 1):
                    bucket = cells.get((cx, cy, cz))
                    if not bucket:
                        continue
                    for item_id, item in bucket.items():
                        if exclude_id is not None and item_id == exclude_id:
                            continue
                        pos = item.position
                        dx = pos.x - px
                        dy = pos.y - py
                        dz = pos.z - pz
                        if dx * dx + dy * dy + dz * dz <= radius_sq:
                            append(item)
        return found

    def _discard(self, item_id: int, handle: CellKey) -> None:
        bucket = self._cells.get(handle)
        if bucket is None or item_id not in bucket:
            return
        del bucket[item_id]
        self._count -= 1
        if not bucket:
            del self._cells[handle]

    def _cell_key(self, position: Vector3) -> CellKey:
        cell = self._cell_size
        return (math.floor(position.x / cell), math.floor(position.y / cell), math.floor(position.z / cell))
