"""Logical topologies, offline greedy chunk scheduling, resource tracking and statistics for simulating collective communication."""

__version__ = "0.1.0"