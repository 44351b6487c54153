import pytest

from astrasim.common import ComType
from astrasim.logical_topology import (
    BasicLogicalTopology,
    BasicTopology,
    ComplexLogicalTopology,
    LogicalTopology,
)


class _Line(BasicLogicalTopology):
    def __init__(self, size):
        super().__init__(BasicTopology.RING)
        self.size = size

    def get_num_of_nodes_in_dimension(self, dimension):
        return self.size


class _Pair(ComplexLogicalTopology):
    def __init__(self, first, second):
        self.parts = [first, second]

    def get_num_of_dimensions(self):
        return len(self.parts)

    def get_num_of_nodes_in_dimension(self, dimension):
        return self.parts[dimension].get_num_of_nodes_in_dimension(0)

    def get_basic_topology_at_dimension(self, dimension, com_type):
        return self.parts[dimension]


def test_logical_topology_is_abstract():
    with pytest.raises(TypeError):
        LogicalTopology()


def test_basic_topology_requires_node_count():
    with pytest.raises(TypeError):
        BasicLogicalTopology(BasicTopology.RING)


def test_complex_topology_requires_all_methods():
    class Partial(ComplexLogicalTopology):
        def get_num_of_dimensions(self):
            return 2

    with pytest.raises(TypeError):
        ComplexLogicalTopology()
    with pytest.raises(TypeError):
        Partial()


def test_basic_topology_has_one_dimension():
    line = _Line(6)
    assert BasicLogicalTopology.get_num_of_dimensions(line) == 1
    assert line.get_num_of_nodes_in_dimension(0) == 6
    assert line.basic_topology is BasicTopology.RING


def test_basic_topology_returns_itself():
    line = _Line(3)
    assert (
        BasicLogicalTopology.get_basic_topology_at_dimension(
            line, 0, ComType.ALL_REDUCE
        )
        is line
    )
    assert LogicalTopology.get_topology(line) is line


def test_complex_topology_delegates_to_parts():
    first, second = _Line(2), _Line(5)
    pair = _Pair(first, second)
    assert pair.get_num_of_dimensions() == 2
    assert pair.get_num_of_nodes_in_dimension(1) == 5
    assert pair.get_basic_topology_at_dimension(0, ComType.ALL_GATHER) is first
    assert LogicalTopology.get_topology(pair) is pair
    assert BasicLogicalTopology.get_num_of_dimensions(second) == 1