"""
System stats collectors for CPU, memory, disk, network, power and host info.
"""

import logging
import platform
import threading
import time
from typing import Any, Dict, List

import psutil

from .base import BaseCollector

logger = logging.getLogger(__name__)


class CPUCollector(BaseCollector):
    """
    CPU usage percentage, overall and per core.

    Uses non-blocking psutil calls (percentage since the last poll).
    """

    collector_type = "cpu"

    def collect(self) -> Dict[str, Any]:
        per_core = psutil.cpu_percent(interval=None, percpu=True)
        usage = sum(per_core) / len(per_core) if per_core else 0.0
        load = psutil.getloadavg() if hasattr(psutil, "getloadavg") else (0.0, 0.0, 0.0)
        return {"usage": usage, "cores": per_core, "load": list(load)}

    def get_fallback_data(self) -> Dict[str, Any]:
        return {"usage": 0.0, "cores": [], "load": [0.0, 0.0, 0.0]}


class MemoryCollector(BaseCollector):
    """Memory usage in bytes and percent."""

    collector_type = "memory"

    def collect(self) -> Dict[str, Any]:
        mem = psutil.virtual_memory()
        return {
            "total": mem.total,
            "used": mem.used,
            "free": mem.available,
            "percent": mem.percent,
        }

    def get_fallback_data(self) -> Dict[str, Any]:
        return {"total": 0, "used": 0, "free": 0, "percent": 0.0}


class DiskCollector(BaseCollector):
    """
    Disk usage per mounted partition.

    Settings:
        paths: Mount points to report (default: every physical partition)
    """

    collector_type = "disk"

    def collect(self) -> List[Dict[str, Any]]:
        paths = self.settings.get("paths")
        if not paths:
            paths = [part.mountpoint for part in psutil.disk_partitions(all=False)]

        disks = []
        for path in paths:
            try:
                usage = psutil.disk_usage(path)
            except OSError as e:
                logger.debug(f"Skipping disk {path}: {e}")
                continue
            disks.append(
                {
                    "mount": path,
                    "total": usage.total,
                    "used": usage.used,
                    "free": usage.free,
                    "percent": usage.percent,
                }
            )
        return disks

    def get_fallback_data(self) -> List[Dict[str, Any]]:
        return []


class NetworkCollector(BaseCollector):
    """
    Per-interface network throughput in bytes per second.

    Settings:
        ignore: Interface names to leave out (default: ["lo"])
    """

    collector_type = "net"

    def __init__(self, settings=None):
        super().__init__(settings)
        self._last_counters: Dict[str, Any] = {}
        self._last_time = 0.0
        self._lock = threading.Lock()

    def collect(self) -> List[Dict[str, Any]]:
        ignore = set(self.settings.get("ignore", ["lo"]))

        with self._lock:
            counters = psutil.net_io_counters(pernic=True)
            current_time = time.time()
            elapsed = current_time - self._last_time if self._last_time else 0.0

            interfaces = []
            for name, io in sorted(counters.items()):
                if name in ignore:
                    continue
                last = self._last_counters.get(name)
                if last is not None and elapsed > 0:
                    upload = max(io.bytes_sent - last.bytes_sent, 0) / elapsed
                    download = max(io.bytes_recv - last.bytes_recv, 0) / elapsed
                else:
                    upload = download = 0.0
                interfaces.append(
                    {
                        "interface": name,
                        "uploadSpeed": upload,
                        "downloadSpeed": download,
                        "bytesSent": io.bytes_sent,
                        "bytesReceived": io.bytes_recv,
                    }
                )

            self._last_counters = counters
            self._last_time = current_time
            return interfaces

    def get_fallback_data(self) -> List[Dict[str, Any]]:
        return []


class PowerCollector(BaseCollector):
    """
    Battery state.

    Reports a list with one entry per battery (psutil exposes at most one);
    ``status`` is "discharging", "charging" or "full". Empty without a battery.
    """

    collector_type = "power"

    def collect(self) -> List[Dict[str, Any]]:
        battery = psutil.sensors_battery()
        if battery is None:
            return []

        if battery.power_plugged:
            status = "full" if battery.percent >= 100 else "charging"
        else:
            status = "discharging"

        remaining = battery.secsleft
        if remaining in (psutil.POWER_TIME_UNKNOWN, psutil.POWER_TIME_UNLIMITED):
            remaining = None

        return [{"percent": battery.percent, "status": status, "remaining": remaining}]

    def get_fallback_data(self) -> List[Dict[str, Any]]:
        return []


class SystemCollector(BaseCollector):
    """Static host information plus uptime."""

    collector_type = "system"

    def collect(self) -> Dict[str, Any]:
        uname = platform.uname()
        return {
            "hostname": uname.node,
            "platform": uname.system,
            "release": uname.release,
            "arch": uname.machine,
            "uptime": time.time() - psutil.boot_time(),
        }


DEFAULT_COLLECTORS = (
    CPUCollector,
    MemoryCollector,
    DiskCollector,
    NetworkCollector,
    PowerCollector,
    SystemCollector,
)
