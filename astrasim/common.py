"""Core enumerations, request records and callback interfaces of the simulator."""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum, IntEnum

CLOCK_PERIOD = 1  # 1 ns
FREQ = 1000 * 1000 * 1000  # 1 GHz


class TimeType(IntEnum):
    """Resolution of a timestamp."""

    SE = 0
    MS = 1
    US = 2
    NS = 3
    FS = 4


class ReqType(IntEnum):
    """Element type of a simulated request."""

    UINT8 = 0
    BFLOAT16 = 1
    FP32 = 2


@dataclass
class Timespec:
    """A time value together with its resolution."""

    time_res: TimeType = TimeType.NS
    time_val: float = 0.0


@dataclass
class SimRequest:
    """Description of a send or receive handed to the network backend."""

    src_rank: int = 0
    dst_rank: int = 0
    tag: int = 0
    req_type: ReqType = ReqType.UINT8
    req_count: int = 0
    vnet: int = 0
    layer_num: int = 0


class ComType(Enum):
    NONE = 0
    REDUCE_SCATTER = 1
    ALL_GATHER = 2
    ALL_REDUCE = 3
    ALL_TO_ALL = 4
    ALL_REDUCE_ALL_TO_ALL = 5


class CollectiveOptimization(Enum):
    BASELINE = 0
    LOCAL_BW_AWARE = 1


class CollectiveImplType(Enum):
    RING = 0
    ONE_RING = 1
    DIRECT = 2
    ONE_DIRECT = 3
    ALL_TO_ALL = 4
    DOUBLE_BINARY_TREE_LOCAL_ALL_TO_ALL = 5
    LOCAL_RING_NODE_A2A_GLOBAL_DBT = 6
    HIERARCHICAL_RING = 7
    DOUBLE_BINARY_TREE = 8
    HALVING_DOUBLING = 9
    ONE_HALVING_DOUBLING = 10
    CHAKRA_IMPL = 11


class CollectiveBarrier(Enum):
    BLOCKING = 0
    NON_BLOCKING = 1


class SchedulingPolicy(Enum):
    LIFO = 0
    FIFO = 1
    EXPLICIT = 2
    NONE = 3


class IntraDimensionScheduling(Enum):
    FIFO = 0
    RG = 1
    SMALLEST_FIRST = 2
    LESS_REMAINING_PHASE_FIRST = 3


class InterDimensionScheduling(Enum):
    ASCENDING = 0
    ONLINE_GREEDY = 1
    ROUND_ROBIN = 2
    OFFLINE_GREEDY = 3
    OFFLINE_GREEDY_FLEX = 4


class InjectionPolicy(Enum):
    INFINITE = 0
    AGGRESSIVE = 1
    SEMI_AGGRESSIVE = 2
    EXTRA_AGGRESSIVE = 3
    NORMAL = 4


class PacketRouting(Enum):
    HARDWARE = 0
    SOFTWARE = 1


class BusType(Enum):
    BOTH = 0
    SHARED = 1
    MEM = 2


class StreamState(Enum):
    CREATED = 0
    TRANSFERRING = 1
    READY = 2
    EXECUTING = 3
    ZOMBIE = 4
    DEAD = 5


class EventType(Enum):
    CALL_EVENTS = 0
    GENERAL = 1
    RENDEZVOUS_SEND = 2
    RENDEZVOUS_RECV = 3
    PACKET_RECEIVED = 4
    PACKET_SENT = 5
    REC_FINISHED = 6
    SEND_FINISHED = 7
    PROCESSING_FINISHED = 8
    NPU_TO_MA = 9
    MA_TO_NPU = 10
    CONSIDER_PROCESS = 11
    CONSIDER_RETIRE = 12
    CONSIDER_SEND_BACK = 13
    STREAM_INIT = 14
    COMM_PROCESSING_FINISHED = 15
    COLLECTIVE_COMMUNICATION_FINISHED = 16
    COMP_FINISHED = 17
    MEM_LOAD_FINISHED = 18
    MEM_STORE_FINISHED = 19


@dataclass
class CollectiveImpl:
    """How a collective algorithm is implemented, as given in the system input."""

    type: CollectiveImplType

    def clone(self) -> CollectiveImpl:
        """Return an independent copy of this description."""
        return copy.copy(self)


@dataclass
class DirectCollectiveImpl(CollectiveImpl):
    """Direct implementation together with its collective window."""

    direct_collective_window: int


@dataclass
class ChakraCollectiveImpl(CollectiveImpl):
    """Implementation described by a Chakra execution trace file."""

    filename: str


class CallData:
    """Base class for data passed along with an event callback."""


@dataclass
class IntData(CallData):
    """Callback data carrying an integer and an execution time."""

    data: int
    execution_time: int = 0


class Callable(ABC):
    """Something that can be notified of a simulation event."""

    @abstractmethod
    def call(self, event: EventType, data: CallData | None) -> None:
        """Handle ``event`` with its accompanying ``data``."""


@dataclass
class LayerData:
    """Per-layer statistics of a run."""

    layer_name: str = ""
    total_forward_pass_compute: float = 0.0
    total_weight_grad_compute: float = 0.0
    total_input_grad_compute: float = 0.0
    total_waiting_for_fwd_comm: float = 0.0
    total_waiting_for_wg_comm: float = 0.0
    total_waiting_for_ig_comm: float = 0.0
    total_fwd_comm: float = 0.0
    total_weight_grad_comm: float = 0.0
    total_input_grad_comm: float = 0.0
    # (phase number, latency) pairs
    avg_queuing_delay: list[tuple[int, float]] = field(default_factory=list)
    avg_network_message_delay: list[tuple[int, float]] = field(default_factory=list)


@dataclass
class AstraSimData:
    """Summary statistics of a whole run."""

    run_name: str = ""
    layers_stats: list[LayerData] = field(default_factory=list)
    avg_chunk_latency_per_logical_dimension: list[float] = field(default_factory=list)
    workload_finished_time: float = 0.0
    total_compute: float = 0.0
    total_exposed_comm: float = 0.0