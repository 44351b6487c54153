"""Abstract interfaces of the logical topologies that collectives run over."""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum

from astrasim.common import ComType


class BasicTopology(Enum):
    """Shape of a one-dimensional logical topology."""

    RING = 0
    BINARY_TREE = 1


class LogicalTopology(ABC):
    """A logical arrangement of NPUs in one or more dimensions."""

    def get_topology(self) -> LogicalTopology:
        """Return the topology to use for the next collective."""
        return self

    @abstractmethod
    def get_num_of_dimensions(self) -> int:
        """Number of logical dimensions."""

    @abstractmethod
    def get_num_of_nodes_in_dimension(self, dimension: int) -> int:
        """Number of NPUs taking part in ``dimension``."""

    @abstractmethod
    def get_basic_topology_at_dimension(
        self, dimension: int, com_type: ComType
    ) -> BasicLogicalTopology | None:
        """The one-dimensional topology used for ``com_type`` in ``dimension``."""


class BasicLogicalTopology(LogicalTopology):
    """A topology with a single dimension, such as a ring or a tree."""

    def __init__(self, basic_topology: BasicTopology) -> None:
        self.basic_topology = basic_topology

    def get_num_of_dimensions(self) -> int:
        return 1

    @abstractmethod
    def get_num_of_nodes_in_dimension(self, dimension: int) -> int:
        """Number of NPUs in this topology."""

    def get_basic_topology_at_dimension(
        self, dimension: int, com_type: ComType
    ) -> BasicLogicalTopology:
        return self


class ComplexLogicalTopology(LogicalTopology):
    """A topology composed of several basic topologies, one per dimension."""