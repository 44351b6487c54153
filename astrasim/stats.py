"""Accumulators for network and bus statistics."""

from __future__ import annotations

import math
from dataclasses import dataclass, field, fields
from itertools import zip_longest

from astrasim.common import BusType


def _divide(value: float, count: int) -> float:
    """Divide like IEEE floating point: a zero count gives inf or nan."""
    if count:
        return value / count
    if value == 0 or math.isnan(value):
        return math.nan
    return math.copysign(math.inf, value)


@dataclass
class NetworkStat:
    """Per-phase network message latencies summed over many messages."""

    net_message_latency: list[float] = field(default_factory=list)
    net_message_counter: int = 0

    def update_network_stat(self, other: NetworkStat) -> None:
        """Add ``other``'s latencies phase by phase and count one more sample."""
        self.net_message_latency = [
            mine + theirs
            for mine, theirs in zip_longest(
                self.net_message_latency, other.net_message_latency, fillvalue=0.0
            )
        ]
        self.net_message_counter += 1

    def take_network_stat_average(self) -> None:
        """Turn the summed latencies into averages."""
        self.net_message_latency = [
            _divide(latency, self.net_message_counter)
            for latency in self.net_message_latency
        ]


@dataclass
class _BusDelays:
    transfer_queue_delay: float = 0.0
    transfer_delay: float = 0.0
    processing_queue_delay: float = 0.0
    processing_delay: float = 0.0

    def add(self, other: _BusDelays) -> None:
        for f in fields(self):
            setattr(self, f.name, getattr(self, f.name) + getattr(other, f.name))

    def average(self, count: int) -> None:
        for f in fields(self):
            setattr(self, f.name, _divide(getattr(self, f.name), count))


class SharedBusStat:
    """Queueing and processing delays of the shared and memory buses."""

    def __init__(
        self,
        bus_type: BusType,
        transfer_queue_delay: float = 0.0,
        transfer_delay: float = 0.0,
        processing_queue_delay: float = 0.0,
        processing_delay: float = 0.0,
    ) -> None:
        delays = _BusDelays(
            transfer_queue_delay, transfer_delay, processing_queue_delay, processing_delay
        )
        if bus_type is BusType.SHARED:
            self.shared, self.mem = delays, _BusDelays()
        else:
            self.shared, self.mem = _BusDelays(), delays
        self.shared_request_counter = 0
        self.mem_request_counter = 0

    def update_bus_stats(self, bus_type: BusType, other: SharedBusStat) -> None:
        """Accumulate ``other`` into the bus or buses selected by ``bus_type``."""
        if bus_type in (BusType.SHARED, BusType.BOTH):
            self.shared.add(other.shared)
            self.shared_request_counter += 1
        if bus_type in (BusType.MEM, BusType.BOTH):
            self.mem.add(other.mem)
            self.mem_request_counter += 1

    def take_bus_stats_average(self) -> None:
        """Turn the summed delays into per-request averages."""
        self.shared.average(self.shared_request_counter)
        self.mem.average(self.mem_request_counter)