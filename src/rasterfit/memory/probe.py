"""System memory probe backed by psutil."""

from collections.abc import Callable

import psutil
from loguru import logger

from ..common.schemas import MemoryInfo

MB = 1024 * 1024

# Assumed when the platform does not report memory: 256 MB used of 512 MB.
FALLBACK_MEMORY = MemoryInfo(pressure=0.5, used_mb=256.0, limit_mb=512.0, available_mb=256.0)

MemoryProbe = Callable[[], MemoryInfo]


def read_system_memory() -> MemoryInfo:
    """Read used/limit from the OS, or the fallback when unavailable."""
    try:
        vm = psutil.virtual_memory()
    except (psutil.Error, OSError) as exc:
        logger.debug(f"[MemoryProbe] psutil unavailable ({exc}); using fallback")
        return FALLBACK_MEMORY

    if vm.total <= 0:
        return FALLBACK_MEMORY

    used = vm.total - vm.available
    return MemoryInfo(
        pressure=min(1.0, max(0.0, used / vm.total)),
        used_mb=round(used / MB, 2),
        limit_mb=round(vm.total / MB, 2),
        available_mb=round(vm.available / MB, 2),
    )
