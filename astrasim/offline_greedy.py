"""Offline greedy (Themis) scheduling of collective chunks over dimensions."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field, replace

from astrasim.common import ComType, InterDimensionScheduling

_logger = logging.getLogger("astrasim.themis")

_MIB = 1048576


@dataclass
class DimElapsedTime:
    """The load accumulated so far on one dimension."""

    dim_num: int
    elapsed_time: float = 0.0

    def __lt__(self, other: DimElapsedTime) -> bool:
        return self.elapsed_time < other.elapsed_time


@dataclass
class ScheduleBoard:
    """Chunk schedules shared by all NPUs of one simulation.

    The NPU with id 0 is the leader: it computes every schedule, and the
    others read it from here. A schedule is dropped once all NPUs used it.
    """

    num_npus: int
    chunk_schedule: dict[int, list[int]] = field(default_factory=dict)
    schedule_consumer: dict[int, int] = field(default_factory=dict)
    global_chunk_size: dict[int, int] = field(default_factory=dict)
    leader: OfflineGreedy | None = None


def dimensions_and_bandwidths(
    physical_dims: Sequence[int],
    logical_broken_dims: Sequence[int],
    dim_to_break: int,
    bw_at_dimension: Callable[[int], float],
) -> tuple[list[int], list[float]]:
    """Dimension sizes and per-dimension bandwidths the scheduler works with.

    With ``dim_to_break == -1`` the physical dimensions are used. Otherwise the
    logical (broken) dimensions are used, and every dimension after the broken
    one takes the bandwidth of the physical dimension before it.
    """
    if dim_to_break == -1:
        sizes = list(physical_dims)
        return sizes, [bw_at_dimension(i) for i in range(len(sizes))]
    sizes = list(logical_broken_dims)
    bandwidths = [
        bw_at_dimension(i - 1) if i > dim_to_break else bw_at_dimension(i)
        for i in range(len(sizes))
    ]
    return sizes, bandwidths


class OfflineGreedy:
    """Greedy ordering of dimensions per chunk, balancing their loads."""

    def __init__(
        self,
        npu_id: int,
        dim_size: Sequence[int],
        dim_bw: Sequence[float],
        board: ScheduleBoard,
    ) -> None:
        if len(dim_size) != len(dim_bw):
            raise ValueError(
                f"{len(dim_size)} dimension sizes but {len(dim_bw)} bandwidths given"
            )
        self.npu_id = npu_id
        self.dim_size = list(dim_size)
        self.dim_bw = list(dim_bw)
        self.board = board
        self.dim_elapsed_time = [DimElapsedTime(i) for i in range(len(self.dim_size))]
        if npu_id == 0:
            board.leader = self
            _logger.info("Themis is configured with the following parameters:")
            _logger.info("Dim size: %s", "".join(f"{s}, " for s in self.dim_size))
            _logger.info("BW per dim: %s", "".join(f"{b}, " for b in self.dim_bw))

    def reset_loads(self) -> None:
        """Forget all accumulated load and renumber the dimensions in order."""
        for index, dim in enumerate(self.dim_elapsed_time):
            dim.elapsed_time = 0.0
            dim.dim_num = index

    def get_chunk_size_from_elapsed_time(
        self, elapsed_time: float, dim: DimElapsedTime, comm_type: ComType
    ) -> int:
        """Chunk size, in bytes, that would keep ``dim`` busy for ``elapsed_time``."""
        size = self.dim_size[dim.dim_num]
        bw_ratio = self.dim_bw[dim.dim_num] / self.dim_bw[0]
        if comm_type is ComType.REDUCE_SCATTER:
            share = (size - 1) / size
        else:
            share = float(size - 1)
        return int((elapsed_time * bw_ratio) / share * _MIB)

    def _add_load(self, dim: DimElapsedTime, size_index: int, chunk_size: int,
                  comm_type: ComType) -> int:
        """Charge ``chunk_size`` to ``dim``; return the chunk size for the next dimension."""
        size = self.dim_size[size_index]
        bw_ratio = self.dim_bw[size_index] / self.dim_bw[0]
        if comm_type is ComType.REDUCE_SCATTER:
            dim.elapsed_time += ((chunk_size / _MIB) * ((size - 1) / size)) / bw_ratio
            return chunk_size // size
        dim.elapsed_time += ((chunk_size / _MIB) * float(size - 1)) / bw_ratio
        return chunk_size * size

    def _last_involved_index(self, dimensions_involved: Sequence[bool]) -> int:
        last = len(self.dim_elapsed_time) - 1
        while (
            not dimensions_involved[self.dim_elapsed_time[last].dim_num]
            or self.dim_size[self.dim_elapsed_time[last].dim_num] == 1
        ):
            last -= 1
        return last

    def _load_difference_size(
        self,
        dim: DimElapsedTime,
        pointer: int,
        dimensions_involved: Sequence[bool],
        comm_type: ComType,
    ) -> int:
        dims = self.dim_elapsed_time
        if comm_type is ComType.REDUCE_SCATTER:
            difference = abs(dims[-1].elapsed_time - dim.elapsed_time)
            return self.get_chunk_size_from_elapsed_time(
                difference, dim, ComType.REDUCE_SCATTER
            )
        last = self._last_involved_index(dimensions_involved)
        difference = abs(dims[last].elapsed_time - dim.elapsed_time)
        size = self.get_chunk_size_from_elapsed_time(
            difference, dims[last], ComType.ALL_GATHER
        )
        last -= 1
        while pointer <= last:
            num = dims[last].dim_num
            if dimensions_involved[num] and self.dim_size[num] > 1:
                size //= self.dim_size[num]
            last -= 1
        return size

    def _restore_dimension_order(self, comm_type: ComType) -> None:
        by_num: dict[int, DimElapsedTime] = {}
        for dim in self.dim_elapsed_time:
            by_num.setdefault(dim.dim_num, dim)
        first = self.dim_elapsed_time[0]
        self.dim_elapsed_time = [
            by_num[i] if i in by_num else replace(first)
            for i in range(len(self.dim_elapsed_time))
        ]
        if comm_type is ComType.ALL_GATHER:
            self.dim_elapsed_time.reverse()

    def get_chunk_scheduling(
        self,
        chunk_id: int,
        remaining_data_size: int,
        recommended_chunk_size: int,
        dimensions_involved: Sequence[bool],
        inter_dim_scheduling: InterDimensionScheduling,
        comm_type: ComType,
    ) -> tuple[list[int], int]:
        """Order of dimensions for chunk ``chunk_id``.

        Returns the dimension order and the data size still left to schedule
        after this chunk. Raises RuntimeError if no NPU 0 leader exists.
        """
        board = self.board
        if chunk_id in board.chunk_schedule:
            board.schedule_consumer[chunk_id] += 1
            remaining_data_size -= board.global_chunk_size.get(chunk_id, 0)
            if board.schedule_consumer[chunk_id] == board.num_npus:
                schedule = board.chunk_schedule.pop(chunk_id)
                del board.schedule_consumer[chunk_id]
                board.global_chunk_size.pop(chunk_id, None)
                return schedule, remaining_data_size
            return list(board.chunk_schedule[chunk_id]), remaining_data_size

        if self.npu_id != 0:
            if board.leader is None:
                raise RuntimeError("no scheduler for NPU 0 is registered on the board")
            return board.leader.get_chunk_scheduling(
                chunk_id,
                remaining_data_size,
                recommended_chunk_size,
                dimensions_involved,
                inter_dim_scheduling,
                comm_type,
            )

        if comm_type is ComType.ALL_REDUCE:
            comm_type = ComType.REDUCE_SCATTER
        self.dim_elapsed_time.sort(key=lambda d: d.elapsed_time)
        if comm_type is ComType.ALL_GATHER:
            self.dim_elapsed_time.reverse()

        result: list[int] = []
        chunk_size = recommended_chunk_size
        chunk_size_calculated = False
        if inter_dim_scheduling is InterDimensionScheduling.OFFLINE_GREEDY:
            taken = min(remaining_data_size, chunk_size)
            board.global_chunk_size[chunk_id] = taken
            remaining_data_size -= taken

        n = len(self.dim_elapsed_time)
        for pointer, dim in enumerate(self.dim_elapsed_time):
            if not dimensions_involved[dim.dim_num] or self.dim_size[dim.dim_num] == 1:
                result.append(dim.dim_num)
                continue
            if (
                inter_dim_scheduling is InterDimensionScheduling.OFFLINE_GREEDY_FLEX
                and not chunk_size_calculated
            ):
                chunk_size_calculated = True
                chunk_size = self._load_difference_size(
                    dim, pointer, dimensions_involved, comm_type
                )
                taken_size = min(remaining_data_size, recommended_chunk_size)
                if chunk_size < recommended_chunk_size:
                    result = list(range(n))
                    board.global_chunk_size[chunk_id] = taken_size
                    chunk_size = taken_size
                    remaining_data_size -= taken_size
                    board.chunk_schedule[chunk_id] = list(result)
                    board.schedule_consumer[chunk_id] = 1
                    self._restore_dimension_order(comm_type)
                    for my_dim in range(n):
                        if not dimensions_involved[my_dim] or self.dim_size[my_dim] == 1:
                            result.append(my_dim)
                            continue
                        chunk_size = self._add_load(
                            self.dim_elapsed_time[my_dim], my_dim, chunk_size, comm_type
                        )
                    return result, remaining_data_size
                taken = min(remaining_data_size, chunk_size)
                board.global_chunk_size[chunk_id] = taken
                remaining_data_size -= taken
            elif (
                inter_dim_scheduling is InterDimensionScheduling.OFFLINE_GREEDY
                and not chunk_size_calculated
            ):
                chunk_size_calculated = True
                diff_size = self._load_difference_size(
                    dim, pointer, dimensions_involved, comm_type
                )
                if diff_size < recommended_chunk_size // 16:
                    result = list(range(n))
                    board.chunk_schedule[chunk_id] = list(result)
                    board.schedule_consumer[chunk_id] = 1
                    self._restore_dimension_order(comm_type)
                    for my_dim in range(n):
                        if not dimensions_involved[my_dim] or self.dim_size[my_dim] == 1:
                            continue
                        chunk_size = self._add_load(
                            self.dim_elapsed_time[my_dim], my_dim, chunk_size, comm_type
                        )
                    return result, remaining_data_size
            result.append(dim.dim_num)
            chunk_size = self._add_load(dim, dim.dim_num, chunk_size, comm_type)

        board.chunk_schedule[chunk_id] = list(result)
        board.schedule_consumer[chunk_id] = 1
        return result, remaining_data_size