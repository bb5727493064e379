"""Utility functions for exporters - source paths and availability checks"""
import logging
import os
from pathlib import Path

DEFAULT_MOUNTSTATS_PATH = "/proc/self/mountstats"

# Environment override for the mountstats location (containers, tests)
MOUNTSTATS_ENV = "MOUNT_PROC"


def get_mountstats_path() -> str:
    """Return $MOUNT_PROC if set, otherwise /proc/self/mountstats"""
    return os.environ.get(MOUNTSTATS_ENV) or DEFAULT_MOUNTSTATS_PATH


def is_mountstats_available(path: str) -> bool:
    """Check if the mountstats file exists and is readable"""
    logger = logging.getLogger("exporters.mountstats_debug")

    p = Path(path)
    if not p.is_file():
        logger.debug(f"mountstats availability: FAIL - {path} not found")
        return False

    if not os.access(p, os.R_OK):
        logger.debug(f"mountstats availability: FAIL - {path} not readable")
        return False

    return True
