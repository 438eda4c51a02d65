"""GlazeWM process detection.

A small injectable capability: anything matching ProcessCheck can stand in
for is_glazewm_running, which scans the process table with psutil.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Any

import psutil

logger = logging.getLogger(__name__)

GLAZEWM_PROCESS_NAME = "glazewm.exe"

ProcessCheck = Callable[[], bool]


def _names_for(process_name: str) -> set[str]:
    name = process_name.lower()
    return {name, name.removesuffix(".exe")}


def is_glazewm_running(
    process_name: str = GLAZEWM_PROCESS_NAME,
    process_iter: Callable[..., Iterable[Any]] = psutil.process_iter,
) -> bool:
    """Check whether a GlazeWM process is running.

    Matches case-insensitively, with or without the .exe suffix. If the
    process table cannot be read, assumes it is running so the check never
    blocks a connection attempt.
    """
    wanted = _names_for(process_name)
    try:
        for proc in process_iter(attrs=["name"]):
            name = (proc.info.get("name") or "").lower()
            if name in wanted:
                return True
    except (psutil.Error, OSError) as e:
        logger.warning(f"Could not check if GlazeWM is running: {e}")
        return True
    return False
