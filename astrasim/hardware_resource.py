"""Tracking of which execution resources of an NPU are busy."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class NodeType(Enum):
    """Kind of an execution-trace node."""

    INVALID_NODE = "invalid"
    METADATA_NODE = "metadata"
    MEM_LOAD_NODE = "mem_load"
    MEM_STORE_NODE = "mem_store"
    COMP_NODE = "comp"
    COMM_SEND_NODE = "comm_send"
    COMM_RECV_NODE = "comm_recv"
    COMM_COLL_NODE = "comm_coll"


@dataclass
class TraceNode:
    """The parts of an execution-trace node that resource tracking needs."""

    id: int
    type: NodeType
    is_cpu_op: bool = False
    name: str = ""


class HardwareResource:
    """One CPU, one GPU compute and one GPU communication slot per NPU."""

    def __init__(self, num_npus: int) -> None:
        self.num_npus = num_npus
        self.num_in_flight_cpu_ops = 0
        self.num_in_flight_gpu_comp_ops = 0
        self.num_in_flight_gpu_comm_ops = 0

        self.num_cpu_ops = 0
        self.num_gpu_ops = 0
        self.num_gpu_comms = 0

        self.tics_cpu_ops = 0
        self.tics_gpu_ops = 0
        self.tics_gpu_comms = 0

        self.cpu_ops_node: TraceNode | None = None
        self.gpu_ops_node: TraceNode | None = None
        self.gpu_comms_node: TraceNode | None = None

    def occupy(self, node: TraceNode) -> None:
        """Mark the slot that ``node`` runs on as busy.

        Raises RuntimeError if that slot is already busy.
        """
        if node.is_cpu_op:
            if self.num_in_flight_cpu_ops:
                raise RuntimeError(f"CPU is busy, cannot occupy for node {node.id}")
            self.num_in_flight_cpu_ops += 1
            self.num_cpu_ops += 1
        elif node.type is NodeType.COMP_NODE:
            if self.num_in_flight_gpu_comp_ops:
                raise RuntimeError(f"GPU compute is busy, cannot occupy for node {node.id}")
            self.num_in_flight_gpu_comp_ops += 1
            self.num_gpu_ops += 1
            self.gpu_ops_node = node
        elif node.type is not NodeType.COMM_RECV_NODE:
            if self.num_in_flight_gpu_comm_ops:
                raise RuntimeError(f"GPU communication is busy, cannot occupy for node {node.id}")
            self.num_in_flight_gpu_comm_ops += 1
            self.num_gpu_comms += 1
            self.gpu_comms_node = node

    def release(self, node: TraceNode) -> None:
        """Free the slot that ``node`` ran on.

        Raises RuntimeError if that slot was not busy.
        """
        if node.is_cpu_op:
            if self.num_in_flight_cpu_ops != 1:
                raise RuntimeError(f"CPU is not busy, cannot release node {node.id}")
            self.num_in_flight_cpu_ops -= 1
        elif node.type is NodeType.COMP_NODE:
            if self.num_in_flight_gpu_comp_ops != 1:
                raise RuntimeError(f"GPU compute is not busy, cannot release node {node.id}")
            self.num_in_flight_gpu_comp_ops -= 1
        elif node.type is not NodeType.COMM_RECV_NODE:
            if self.num_in_flight_gpu_comm_ops != 1:
                raise RuntimeError(
                    f"GPU communication is not busy, cannot release node {node.id}"
                )
            self.num_in_flight_gpu_comm_ops -= 1

    def is_available(self, node: TraceNode) -> bool:
        """Whether ``node`` could be issued now."""
        if node.is_cpu_op:
            return self.num_in_flight_cpu_ops == 0
        if node.type is NodeType.COMP_NODE:
            return self.num_in_flight_gpu_comp_ops == 0
        return self.num_in_flight_gpu_comm_ops == 0 or node.type is NodeType.COMM_RECV_NODE

    def report(self) -> None:
        """Print operation counts and busy ticks."""
        for label in (
            "num_cpu_ops",
            "num_gpu_ops",
            "num_gpu_comms",
            "tics_cpu_ops",
            "tics_gpu_ops",
            "tics_gpu_comms",
        ):
            print(f"{label}: {getattr(self, label)}")