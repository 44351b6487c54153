"""Multi-dimensional logical topologies built out of rings and binary trees."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from math import prod

from astrasim.binary_tree import BinaryTree, TreeType
from astrasim.common import CollectiveImpl, CollectiveImplType, ComType
from astrasim.logical_topology import (
    BasicLogicalTopology,
    ComplexLogicalTopology,
    LogicalTopology,
)
from astrasim.ring_topology import RingDimension, RingTopology

_logger = logging.getLogger("astrasim.topology.general_complex")

_RING_IMPLS = frozenset(
    {
        CollectiveImplType.RING,
        CollectiveImplType.DIRECT,
        CollectiveImplType.HALVING_DOUBLING,
        # Chakra-described collectives need a logical topology to exist, not
        # its values, so they get a default ring.
        CollectiveImplType.CHAKRA_IMPL,
    }
)

_SINGLE_RING_IMPLS = frozenset(
    {
        CollectiveImplType.ONE_RING,
        CollectiveImplType.ONE_DIRECT,
        CollectiveImplType.ONE_HALVING_DOUBLING,
    }
)


class DoubleBinaryTreeTopology(ComplexLogicalTopology):
    """Two binary trees over the same nodes, handed out in turn."""

    def __init__(self, id: int, total_tree_nodes: int, start: int, stride: int) -> None:
        self.dbmax = BinaryTree(id, TreeType.ROOT_MAX, total_tree_nodes, start, stride)
        self.dbmin = BinaryTree(id, TreeType.ROOT_MIN, total_tree_nodes, start, stride)
        self.counter = 0

    def get_topology(self) -> BinaryTree:
        """Return the root-max tree and the root-min tree alternately."""
        tree = self.dbmax if self.counter % 2 == 0 else self.dbmin
        self.counter += 1
        return tree

    def get_basic_topology_at_dimension(
        self, dimension: int, com_type: ComType
    ) -> BasicLogicalTopology | None:
        if dimension == 0:
            return self.get_topology().get_basic_topology_at_dimension(0, com_type)
        return None

    def get_num_of_dimensions(self) -> int:
        return 1

    def get_num_of_nodes_in_dimension(self, dimension: int) -> int:
        return self.dbmin.get_num_of_nodes_in_dimension(0)


class GeneralComplexTopology(ComplexLogicalTopology):
    """One logical topology per dimension, chosen by that dimension's collective."""

    def __init__(
        self,
        id: int,
        dimension_size: Sequence[int],
        collective_impl: Sequence[CollectiveImpl],
    ) -> None:
        if len(collective_impl) > len(dimension_size):
            raise ValueError(
                f"{len(collective_impl)} collective implementations given "
                f"for {len(dimension_size)} dimensions"
            )
        self.dimension_topology: list[LogicalTopology] = []
        offset = 1
        last_dim = len(collective_impl) - 1
        for dim, (impl, size) in enumerate(zip(collective_impl, dimension_size)):
            if impl.type in _RING_IMPLS:
                self.dimension_topology.append(
                    RingTopology(
                        RingDimension.NA, id, size, (id % (offset * size)) // offset, offset
                    )
                )
            elif impl.type in _SINGLE_RING_IMPLS:
                total_npus = prod(dimension_size)
                self.dimension_topology.append(
                    RingTopology(RingDimension.NA, id, total_npus, id % total_npus, 1)
                )
                return
            elif impl.type is CollectiveImplType.DOUBLE_BINARY_TREE:
                if dim == last_dim:
                    start = id % offset
                else:
                    start = (id - id % (offset * size)) + id % offset
                self.dimension_topology.append(
                    DoubleBinaryTreeTopology(id, size, start, offset)
                )
            offset *= size

    def _topology_at(self, dimension: int) -> LogicalTopology:
        if not 0 <= dimension < len(self.dimension_topology):
            _logger.critical(
                "dim: %s requested! but max dim is %s",
                dimension,
                len(self.dimension_topology) - 1,
            )
            raise IndexError(
                f"dimension {dimension} requested, but there are only "
                f"{len(self.dimension_topology)}"
            )
        return self.dimension_topology[dimension]

    def get_num_of_dimensions(self) -> int:
        return len(self.dimension_topology)

    def get_num_of_nodes_in_dimension(self, dimension: int) -> int:
        return self._topology_at(dimension).get_num_of_nodes_in_dimension(0)

    def get_basic_topology_at_dimension(
        self, dimension: int, com_type: ComType
    ) -> BasicLogicalTopology | None:
        return self._topology_at(dimension).get_basic_topology_at_dimension(0, com_type)


class LocalRingGlobalBinaryTree(ComplexLogicalTopology):
    """A local ring, an empty middle dimension and a global tree or ring."""

    def __init__(
        self,
        id: int,
        local_dim: int,
        tree_type: TreeType,
        total_tree_nodes: int,
        start: int,
        stride: int,
    ) -> None:
        self.local_dimension = RingTopology(
            RingDimension.LOCAL, id, local_dim, id % local_dim, 1
        )
        self.global_dimension_all_reduce = BinaryTree(
            id, tree_type, total_tree_nodes, start, stride
        )
        self.global_dimension_other = RingTopology(
            RingDimension.HORIZONTAL, id, total_tree_nodes, id // local_dim, local_dim
        )

    def get_num_of_dimensions(self) -> int:
        return 3

    def get_num_of_nodes_in_dimension(self, dimension: int) -> int:
        if dimension == 0:
            return self.local_dimension.get_num_of_nodes_in_dimension(0)
        if dimension == 1:
            return 1
        if dimension == 2:
            return self.global_dimension_all_reduce.get_num_of_nodes_in_dimension(0)
        return -1

    def get_basic_topology_at_dimension(
        self, dimension: int, com_type: ComType
    ) -> BasicLogicalTopology | None:
        if dimension == 0:
            return self.local_dimension
        if dimension == 2:
            if com_type is ComType.ALL_REDUCE:
                return self.global_dimension_all_reduce
            return self.global_dimension_other
        return None


class LocalRingNodeA2AGlobalDBT(ComplexLogicalTopology):
    """Local ring, node-level ring and a global double binary tree or ring."""

    def __init__(
        self,
        id: int,
        local_dim: int,
        node_dim: int,
        total_tree_nodes: int,
        start: int,
        stride: int,
    ) -> None:
        self.global_dimension_all_reduce = DoubleBinaryTreeTopology(
            id, total_tree_nodes, start, stride
        )
        self.global_dimension_other = RingTopology(
            RingDimension.VERTICAL,
            id,
            total_tree_nodes,
            id // (local_dim * node_dim),
            local_dim * node_dim,
        )
        self.local_dimension = RingTopology(
            RingDimension.LOCAL, id, local_dim, id % local_dim, 1
        )
        self.node_dimension = RingTopology(
            RingDimension.HORIZONTAL,
            id,
            node_dim,
            (id % (local_dim * node_dim)) // local_dim,
            local_dim,
        )

    def get_num_of_dimensions(self) -> int:
        return 3

    def get_num_of_nodes_in_dimension(self, dimension: int) -> int:
        if dimension == 0:
            return self.local_dimension.get_num_of_nodes_in_dimension(0)
        if dimension == 1:
            return self.node_dimension.get_num_of_nodes_in_dimension(0)
        if dimension == 2:
            return self.global_dimension_other.get_num_of_nodes_in_dimension(0)
        return -1

    def get_basic_topology_at_dimension(
        self, dimension: int, com_type: ComType
    ) -> BasicLogicalTopology | None:
        if dimension == 0:
            return self.local_dimension
        if dimension == 1:
            return self.node_dimension
        if dimension == 2:
            if com_type is ComType.ALL_REDUCE:
                return self.global_dimension_all_reduce.get_basic_topology_at_dimension(
                    2, com_type
                )
            return self.global_dimension_other
        return None


class Torus3D(ComplexLogicalTopology):
    """A three-dimensional torus: local, vertical and horizontal rings."""

    def __init__(self, id: int, total_nodes: int, local_dim: int, vertical_dim: int) -> None:
        horizontal_dim = total_nodes // (vertical_dim * local_dim)
        self.local_dimension = RingTopology(
            RingDimension.LOCAL, id, local_dim, id % local_dim, 1
        )
        self.vertical_dimension = RingTopology(
            RingDimension.VERTICAL,
            id,
            vertical_dim,
            id // (local_dim * horizontal_dim),
            local_dim * horizontal_dim,
        )
        self.horizontal_dimension = RingTopology(
            RingDimension.HORIZONTAL,
            id,
            horizontal_dim,
            (id // local_dim) % horizontal_dim,
            local_dim,
        )

    def get_num_of_dimensions(self) -> int:
        return 3

    def get_num_of_nodes_in_dimension(self, dimension: int) -> int:
        if dimension == 0:
            return self.local_dimension.get_num_of_nodes_in_dimension(0)
        if dimension == 1:
            return self.vertical_dimension.get_num_of_nodes_in_dimension(0)
        if dimension == 2:
            return self.horizontal_dimension.get_num_of_nodes_in_dimension(0)
        return -1

    def get_basic_topology_at_dimension(
        self, dimension: int, com_type: ComType
    ) -> BasicLogicalTopology | None:
        if dimension == 0:
            return self.local_dimension
        if dimension == 1:
            return self.vertical_dimension
        if dimension == 2:
            return self.horizontal_dimension
        return None