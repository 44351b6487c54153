import pytest

from astrasim.binary_tree import BinaryTree, TreeType
from astrasim.common import (
    ChakraCollectiveImpl,
    CollectiveImpl,
    CollectiveImplType,
    ComType,
    DirectCollectiveImpl,
)
from astrasim.complex_topologies import (
    DoubleBinaryTreeTopology,
    GeneralComplexTopology,
    LocalRingGlobalBinaryTree,
    LocalRingNodeA2AGlobalDBT,
    Torus3D,
)
from astrasim.ring_topology import Direction, RingTopology


def ring_members(ring, start):
    members = [start]
    node = ring.get_receiver(start, Direction.CLOCKWISE)
    while node != start:
        members.append(node)
        node = ring.get_receiver(node, Direction.CLOCKWISE)
    return members


# DoubleBinaryTreeTopology


def test_double_binary_tree_alternates_trees():
    dbt = DoubleBinaryTreeTopology(0, 4, 0, 1)
    first = dbt.get_topology()
    second = dbt.get_topology()
    third = dbt.get_topology()
    assert first is dbt.dbmax
    assert second is dbt.dbmin
    assert third is dbt.dbmax
    assert dbt.counter == 3


def test_double_binary_tree_basic_topology_alternates():
    dbt = DoubleBinaryTreeTopology(0, 8, 0, 1)
    a = dbt.get_basic_topology_at_dimension(0, ComType.ALL_REDUCE)
    b = dbt.get_basic_topology_at_dimension(0, ComType.ALL_REDUCE)
    assert a.tree_type is TreeType.ROOT_MAX
    assert b.tree_type is TreeType.ROOT_MIN


def test_double_binary_tree_other_dimension_is_none():
    dbt = DoubleBinaryTreeTopology(0, 4, 0, 1)
    assert dbt.get_basic_topology_at_dimension(1, ComType.ALL_REDUCE) is None
    assert dbt.counter == 0


def test_double_binary_tree_sizes():
    dbt = DoubleBinaryTreeTopology(0, 8, 0, 1)
    assert dbt.get_num_of_dimensions() == 1
    assert dbt.get_num_of_nodes_in_dimension(0) == 8


def test_double_binary_tree_trees_share_node_ids():
    dbt = DoubleBinaryTreeTopology(0, 8, 0, 2)
    assert set(dbt.dbmax.node_list) == set(dbt.dbmin.node_list)
    assert all(node_id % 2 == 0 for node_id in dbt.dbmax.node_list)


# GeneralComplexTopology


def test_general_two_rings():
    impls = [CollectiveImpl(CollectiveImplType.RING), CollectiveImpl(CollectiveImplType.RING)]
    topo = GeneralComplexTopology(5, [4, 2], impls)
    assert topo.get_num_of_dimensions() == 2
    assert topo.get_num_of_nodes_in_dimension(0) == 4
    assert topo.get_num_of_nodes_in_dimension(1) == 2


def test_general_ring_members_are_spaced_by_offset():
    impls = [CollectiveImpl(CollectiveImplType.RING), CollectiveImpl(CollectiveImplType.RING)]
    topo = GeneralComplexTopology(5, [4, 2], impls)
    inner = topo.get_basic_topology_at_dimension(0, ComType.ALL_REDUCE)
    outer = topo.get_basic_topology_at_dimension(1, ComType.ALL_REDUCE)
    inner_members = ring_members(inner, 5)
    outer_members = ring_members(outer, 5)
    assert len(inner_members) == 4
    assert len(set(inner_members)) == 4
    assert all(m // 4 == 5 // 4 for m in inner_members)
    assert len(outer_members) == 2
    assert all(m % 4 == 5 % 4 for m in outer_members)
    assert all(0 <= m < 8 for m in inner_members + outer_members)


def test_general_one_ring_stops_after_first():
    impls = [
        CollectiveImpl(CollectiveImplType.ONE_RING),
        CollectiveImpl(CollectiveImplType.RING),
    ]
    topo = GeneralComplexTopology(3, [4, 2], impls)
    assert topo.get_num_of_dimensions() == 1
    assert topo.get_num_of_nodes_in_dimension(0) == 4 * 2
    ring = topo.get_basic_topology_at_dimension(0, ComType.ALL_GATHER)
    assert sorted(ring_members(ring, 3)) == list(range(4 * 2))


def test_general_unhandled_impl_adds_nothing():
    impls = [
        CollectiveImpl(CollectiveImplType.ALL_TO_ALL),
        CollectiveImpl(CollectiveImplType.RING),
    ]
    topo = GeneralComplexTopology(0, [4, 2], impls)
    assert topo.get_num_of_dimensions() == 1
    assert topo.get_num_of_nodes_in_dimension(0) == 2


def test_general_direct_and_chakra_give_rings():
    impls = [
        DirectCollectiveImpl(CollectiveImplType.DIRECT, 2),
        ChakraCollectiveImpl(CollectiveImplType.CHAKRA_IMPL, "trace.et"),
    ]
    topo = GeneralComplexTopology(0, [2, 3], impls)
    assert isinstance(topo.get_basic_topology_at_dimension(0, ComType.ALL_REDUCE), RingTopology)
    assert isinstance(topo.get_basic_topology_at_dimension(1, ComType.ALL_REDUCE), RingTopology)
    assert topo.get_num_of_nodes_in_dimension(1) == 3


def test_general_double_binary_tree_last_dimension():
    impls = [CollectiveImpl(CollectiveImplType.DOUBLE_BINARY_TREE)]
    topo = GeneralComplexTopology(0, [4], impls)
    tree = topo.get_basic_topology_at_dimension(0, ComType.ALL_REDUCE)
    assert isinstance(tree, BinaryTree)
    assert tree.tree_type is TreeType.ROOT_MAX
    again = topo.get_basic_topology_at_dimension(0, ComType.ALL_REDUCE)
    assert again.tree_type is TreeType.ROOT_MIN
    assert topo.get_num_of_nodes_in_dimension(0) == 4


def test_general_double_binary_tree_inner_dimension_uses_offset():
    impls = [
        CollectiveImpl(CollectiveImplType.RING),
        CollectiveImpl(CollectiveImplType.DOUBLE_BINARY_TREE),
        CollectiveImpl(CollectiveImplType.RING),
    ]
    topo = GeneralComplexTopology(1, [2, 4, 2], impls)
    tree = topo.get_basic_topology_at_dimension(1, ComType.ALL_REDUCE)
    assert isinstance(tree, BinaryTree)
    assert tree.stride == 2
    assert all(node_id % 2 == 1 for node_id in tree.node_list)


def test_general_too_many_impls():
    impls = [CollectiveImpl(CollectiveImplType.RING)] * 3
    with pytest.raises(ValueError):
        GeneralComplexTopology(0, [2, 2], impls)


def test_general_dimension_out_of_range():
    topo = GeneralComplexTopology(0, [2], [CollectiveImpl(CollectiveImplType.RING)])
    with pytest.raises(IndexError):
        topo.get_num_of_nodes_in_dimension(1)
    with pytest.raises(IndexError):
        topo.get_basic_topology_at_dimension(-1, ComType.ALL_REDUCE)


# LocalRingGlobalBinaryTree


def test_local_ring_global_binary_tree_sizes():
    topo = LocalRingGlobalBinaryTree(3, 2, TreeType.ROOT_MAX, 4, 0, 2)
    assert topo.get_num_of_dimensions() == 3
    assert topo.get_num_of_nodes_in_dimension(0) == 2
    assert topo.get_num_of_nodes_in_dimension(1) == 1
    assert topo.get_num_of_nodes_in_dimension(2) == 4
    assert topo.get_num_of_nodes_in_dimension(3) == -1


def test_local_ring_global_binary_tree_basic_topologies():
    topo = LocalRingGlobalBinaryTree(3, 2, TreeType.ROOT_MIN, 4, 0, 2)
    assert topo.get_basic_topology_at_dimension(0, ComType.ALL_REDUCE) is topo.local_dimension
    assert topo.get_basic_topology_at_dimension(1, ComType.ALL_REDUCE) is None
    assert (
        topo.get_basic_topology_at_dimension(2, ComType.ALL_REDUCE)
        is topo.global_dimension_all_reduce
    )
    assert (
        topo.get_basic_topology_at_dimension(2, ComType.ALL_GATHER)
        is topo.global_dimension_other
    )
    assert topo.get_basic_topology_at_dimension(5, ComType.ALL_GATHER) is None
    assert topo.global_dimension_all_reduce.tree_type is TreeType.ROOT_MIN


def test_local_ring_global_binary_tree_ring_members():
    topo = LocalRingGlobalBinaryTree(3, 2, TreeType.ROOT_MAX, 4, 0, 2)
    local = ring_members(topo.local_dimension, 3)
    other = ring_members(topo.global_dimension_other, 3)
    assert len(local) == 2 and all(m // 2 == 3 // 2 for m in local)
    assert len(other) == 4 and all(m % 2 == 3 % 2 for m in other)


# LocalRingNodeA2AGlobalDBT


def test_local_ring_node_a2a_global_dbt_sizes():
    topo = LocalRingNodeA2AGlobalDBT(5, 2, 2, 3, 1, 4)
    assert topo.get_num_of_dimensions() == 3
    assert topo.get_num_of_nodes_in_dimension(0) == 2
    assert topo.get_num_of_nodes_in_dimension(1) == 2
    assert topo.get_num_of_nodes_in_dimension(2) == 3
    assert topo.get_num_of_nodes_in_dimension(7) == -1


def test_local_ring_node_a2a_global_dbt_basic_topologies():
    topo = LocalRingNodeA2AGlobalDBT(5, 2, 2, 3, 1, 4)
    assert topo.get_basic_topology_at_dimension(0, ComType.ALL_REDUCE) is topo.local_dimension
    assert topo.get_basic_topology_at_dimension(1, ComType.ALL_REDUCE) is topo.node_dimension
    assert (
        topo.get_basic_topology_at_dimension(2, ComType.REDUCE_SCATTER)
        is topo.global_dimension_other
    )
    # The global tree is asked for its dimension 2, which it does not have.
    assert topo.get_basic_topology_at_dimension(2, ComType.ALL_REDUCE) is None
    assert topo.get_basic_topology_at_dimension(3, ComType.ALL_REDUCE) is None


def test_local_ring_node_a2a_global_dbt_ring_spacing():
    topo = LocalRingNodeA2AGlobalDBT(5, 2, 2, 3, 1, 4)
    node_ring = ring_members(topo.node_dimension, 5)
    global_ring = ring_members(topo.global_dimension_other, 5)
    assert len(node_ring) == 2 and all(m % 2 == 5 % 2 for m in node_ring)
    assert len(global_ring) == 3 and all(m % 4 == 5 % 4 for m in global_ring)


# Torus3D


def test_torus_sizes():
    torus = Torus3D(5, 8, 2, 2)
    assert torus.get_num_of_dimensions() == 3
    assert torus.get_num_of_nodes_in_dimension(0) == 2
    assert torus.get_num_of_nodes_in_dimension(1) == 2
    assert torus.get_num_of_nodes_in_dimension(2) == 8 // (2 * 2)
    assert torus.get_num_of_nodes_in_dimension(3) == -1


def test_torus_basic_topologies():
    torus = Torus3D(5, 8, 2, 2)
    assert torus.get_basic_topology_at_dimension(0, ComType.ALL_REDUCE) is torus.local_dimension
    assert (
        torus.get_basic_topology_at_dimension(1, ComType.ALL_REDUCE) is torus.vertical_dimension
    )
    assert (
        torus.get_basic_topology_at_dimension(2, ComType.ALL_REDUCE)
        is torus.horizontal_dimension
    )
    assert torus.get_basic_topology_at_dimension(3, ComType.ALL_REDUCE) is None


@pytest.mark.parametrize("npu", range(8))
def test_torus_rings_cover_the_torus(npu):
    torus = Torus3D(npu, 8, 2, 2)
    local = ring_members(torus.local_dimension, npu)
    vertical = ring_members(torus.vertical_dimension, npu)
    horizontal = ring_members(torus.horizontal_dimension, npu)
    assert all(0 <= m < 8 for m in local + vertical + horizontal)
    assert len(set(local)) == 2 and all(m // 2 == npu // 2 for m in local)
    assert len(set(vertical)) == 2 and all(m % 4 == npu % 4 for m in vertical)
    assert len(set(horizontal)) == 2 and all(m % 2 == npu % 2 for m in horizontal)
    for ring, members in (
        (torus.local_dimension, local),
        (torus.vertical_dimension, vertical),
        (torus.horizontal_dimension, horizontal),
    ):
        for m in members:
            receiver = ring.get_receiver(m, Direction.CLOCKWISE)
            assert ring.get_sender(receiver, Direction.CLOCKWISE) == m