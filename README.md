# astrasim

Building blocks for simulating collective communication in distributed
training systems: logical topologies, an offline greedy scheduler that spreads
collective chunks over network dimensions, resource tracking for
execution-trace nodes, and statistics records. The package has no runtime
dependencies.

## Modules

- `astrasim.common`: enumerations shared by the other modules (`ComType`,
  `EventType`, `CollectiveImplType`, `InterDimensionScheduling`,
  `InjectionPolicy`, `BusType`, `StreamState` and others), the request record
  `SimRequest`, descriptions of collective implementations (`CollectiveImpl`,
  `DirectCollectiveImpl`, `ChakraCollectiveImpl`, each with `clone()`), the
  abstract `Callable` event interface with `CallData` and `IntData`, and the
  result records `LayerData` and `AstraSimData`.
- `astrasim.stats`: `NetworkStat` sums per-phase message latencies
  (`update_network_stat`) and averages them (`take_network_stat_average`);
  `SharedBusStat` does the same for shared-bus and memory-bus delays
  (`update_bus_stats`, `take_bus_stats_average`). Averaging over zero samples
  gives `inf` or `nan`, as floating-point division would.
- `astrasim.hardware_resource`: `HardwareResource` keeps one CPU slot, one GPU
  compute slot and one GPU communication slot. `occupy`, `release` and
  `is_available` take a `TraceNode` (id, `NodeType`, CPU flag, name); receive
  nodes never hold the communication slot. Occupying a busy slot or releasing
  a free one raises `RuntimeError`. `report()` prints counts and busy ticks.
- `astrasim.logical_topology`: the abstract `LogicalTopology`,
  `BasicLogicalTopology` (one dimension) and `ComplexLogicalTopology`.
- `astrasim.ring_topology`: `RingTopology`, a ring whose NPU ids are `offset`
  apart, or built from an explicit list with `RingTopology.from_npus`.
  `get_receiver` and `get_sender` walk the ring in a `Direction`.
- `astrasim.binary_tree`: `BinaryTree`, with in-order ids `stride` apart, the
  root placed by `TreeType`; it answers parent, child and `TreeNodeType`
  queries and `describe()` lists a subtree.
- `astrasim.complex_topologies`: `DoubleBinaryTreeTopology` (hands out its two
  trees in turn), `GeneralComplexTopology` (one topology per dimension chosen
  from each dimension's `CollectiveImpl`), `LocalRingGlobalBinaryTree`,
  `LocalRingNodeA2AGlobalDBT` and `Torus3D`.
- `astrasim.offline_greedy`: `OfflineGreedy` orders dimensions for each chunk
  so as to balance the load accumulated on them. NPUs of one simulation share a
  `ScheduleBoard`; the NPU with id 0 computes schedules and the others read
  them. `get_chunk_scheduling` returns the dimension order together with the
  data size still left. `dimensions_and_bandwidths` works out the dimension
  sizes and bandwidths to give the scheduler.

## Installing

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Example

```python
from astrasim.common import ComType, InterDimensionScheduling
from astrasim.ring_topology import Direction, RingDimension, RingTopology
from astrasim.complex_topologies import Torus3D
from astrasim.offline_greedy import OfflineGreedy, ScheduleBoard

ring = RingTopology(RingDimension.LOCAL, 0, 4, 0, 1)
ring.get_receiver(0, Direction.CLOCKWISE)      # 1
ring.get_sender(0, Direction.CLOCKWISE)        # 3

torus = Torus3D(0, 64, 4, 4)
torus.get_num_of_dimensions()                  # 3
torus.get_num_of_nodes_in_dimension(2)         # 4

board = ScheduleBoard(num_npus=1)
scheduler = OfflineGreedy(0, [4, 4], [100.0, 50.0], board)
order, remaining = scheduler.get_chunk_scheduling(
    0, 1 << 20, 1 << 18, [True, True],
    InterDimensionScheduling.OFFLINE_GREEDY, ComType.ALL_REDUCE,
)
```

## What it does not do

There is no event-driven simulation engine here, and no command to run. The
package does not read execution traces or communicator-group files, does not
run collective algorithms or move packets, and has no network or memory
backend. `Callable`, `CallData` and the enumerations describe events, but
nothing in the package dispatches them.