"""Ring-shaped logical topology."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from enum import Enum

from astrasim.logical_topology import BasicLogicalTopology, BasicTopology

_logger = logging.getLogger("astrasim.topology.ring")


class Direction(Enum):
    """Direction of travel around a ring."""

    CLOCKWISE = 0
    ANTICLOCKWISE = 1


class RingDimension(Enum):
    """Which physical dimension a ring spans."""

    LOCAL = 0
    VERTICAL = 1
    HORIZONTAL = 2
    NA = 3


def _dimension_name(dimension: RingDimension) -> str:
    if dimension is RingDimension.VERTICAL:
        return "vertical"
    if dimension is RingDimension.HORIZONTAL:
        return "horizontal"
    return "local"


class RingTopology(BasicLogicalTopology):
    """A ring of NPUs whose ids are spaced ``offset`` apart."""

    def __init__(
        self,
        dimension: RingDimension,
        id: int,
        total_nodes_in_ring: int,
        index_in_ring: int,
        offset: int,
    ) -> None:
        super().__init__(BasicTopology.RING)
        self.name = _dimension_name(dimension)
        if id == 0:
            _logger.info(
                "ring of node 0, id: %s dimension: %s total nodes in ring: %s "
                "index in ring: %s offset: %s",
                id, self.name, total_nodes_in_ring, index_in_ring, offset,
            )
        self.id = id
        self.total_nodes_in_ring = total_nodes_in_ring
        self.index_in_ring = index_in_ring
        self.dimension = dimension
        self.offset = offset
        self._id_to_index: dict[int, int] = {id: index_in_ring}
        self._index_to_id: dict[int, int] = {index_in_ring: id}

        node = id
        for _ in range(total_nodes_in_ring - 1):
            node = self._place_next(node, Direction.CLOCKWISE)

    @classmethod
    def from_npus(
        cls, dimension: RingDimension, id: int, npus: Sequence[int]
    ) -> RingTopology:
        """Build a ring through the given NPUs, in order.

        Raises ValueError if ``id`` is not among ``npus``.
        """
        ring = cls.__new__(cls)
        BasicLogicalTopology.__init__(ring, BasicTopology.RING)
        ring.name = _dimension_name(dimension)
        ring.id = id
        ring.total_nodes_in_ring = len(npus)
        ring.dimension = dimension
        ring.offset = -1
        ring.index_in_ring = -1
        ring._id_to_index = {}
        ring._index_to_id = {}
        for index, npu in enumerate(npus):
            ring._id_to_index[npu] = index
            ring._index_to_id[index] = npu
            if npu == id:
                ring.index_in_ring = index
        _logger.info(
            "custom ring, id: %s, dimension: %s total nodes in ring: %s index in ring: %s",
            id, ring.name, ring.total_nodes_in_ring, ring.index_in_ring,
        )
        if ring.index_in_ring < 0:
            raise ValueError(f"NPU {id} is not part of the ring {list(npus)}")
        return ring

    def _index_of(self, node_id: int) -> int:
        try:
            return self._id_to_index[node_id]
        except KeyError:
            raise KeyError(f"node {node_id} is not part of this ring") from None

    def _place_next(self, node_id: int, direction: Direction) -> int:
        """Work out and record the neighbour of ``node_id`` in a uniform ring."""
        index = self._index_of(node_id)
        last = self.total_nodes_in_ring - 1
        if direction is Direction.CLOCKWISE:
            receiver = node_id + self.offset
            if index == last:
                receiver -= self.total_nodes_in_ring * self.offset
                index = 0
            else:
                index += 1
        else:
            receiver = node_id - self.offset
            if index == 0:
                receiver += self.total_nodes_in_ring * self.offset
                index = last
            else:
                index -= 1
        if receiver < 0:
            _logger.critical(
                "at dim: %s at id: %s index: %s, node id: %s, offset: %s, "
                "index_in_ring %s receiver %s",
                self.name, self.id, index, node_id, self.offset,
                self.index_in_ring, receiver,
            )
            raise ValueError(
                f"ring at id {self.id} would place negative node id {receiver}"
            )
        self._id_to_index[receiver] = index
        self._index_to_id[index] = receiver
        return receiver

    def get_receiver(self, node_id: int, direction: Direction) -> int:
        """The node that ``node_id`` sends to when moving in ``direction``."""
        index = self._index_of(node_id)
        step = 1 if direction is Direction.CLOCKWISE else -1
        return self._index_to_id[(index + step) % self.total_nodes_in_ring]

    def get_sender(self, node_id: int, direction: Direction) -> int:
        """The node that sends to ``node_id`` when moving in ``direction``."""
        index = self._index_of(node_id)
        step = 1 if direction is Direction.ANTICLOCKWISE else -1
        return self._index_to_id[(index + step) % self.total_nodes_in_ring]

    def get_num_of_nodes_in_dimension(self, dimension: int) -> int:
        return self.total_nodes_in_ring

    def is_enabled(self) -> bool:
        """Whether the ring's first node is NPU 0.

        Raises ValueError for rings built from an explicit NPU list.
        """
        if self.offset <= 0:
            raise ValueError("is_enabled needs a ring with a positive offset")
        return self.id - self.index_in_ring * self.offset == 0