"""
System statistics collection.

Collectors read one kind of statistic each (CPU, memory, disk, network,
power, host info); the stats source polls the modules a theme registered
and pushes the combined payload to its listeners.
"""

from .base import BaseCollector
from .source import CollectorRegistry, StatsSource

__all__ = ["BaseCollector", "CollectorRegistry", "StatsSource"]
