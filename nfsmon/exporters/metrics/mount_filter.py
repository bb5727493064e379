"""Include/exclude filtering of NFS mounts by mount point pattern"""
import logging
import re
from typing import List, Optional, Sequence

logger = logging.getLogger(__name__)


def _compile_patterns(patterns: Sequence[str]) -> List[Optional[re.Pattern]]:
    compiled: List[Optional[re.Pattern]] = []
    for pattern in patterns:
        try:
            compiled.append(re.compile(pattern))
        except re.error as e:
            # None never matches, so an include list of only bad patterns skips every mount
            logger.warning(f"Ignoring invalid mount pattern {pattern!r}: {e}")
            compiled.append(None)
    return compiled


class MountFilter:
    """
    Decides whether a mount's statistics are collected.

    Patterns are regular expressions searched anywhere in the mount point.
    If include patterns are given, only matching mounts are kept. A mount
    matching any exclude pattern is always skipped, even if it is also
    included. Invalid patterns never match.
    """

    def __init__(self, include_mounts: Sequence[str] = (), exclude_mounts: Sequence[str] = ()):
        self.include_mounts = list(include_mounts or [])
        self.exclude_mounts = list(exclude_mounts or [])
        self._include = _compile_patterns(self.include_mounts)
        self._exclude = _compile_patterns(self.exclude_mounts)

    @staticmethod
    def _matches(patterns: List[Optional[re.Pattern]], mountpoint: str) -> bool:
        return any(rx is not None and rx.search(mountpoint) for rx in patterns)

    def should_skip(self, mountpoint: str) -> bool:
        skip = False
        if self._include:
            skip = not self._matches(self._include, mountpoint)
        if self._exclude and self._matches(self._exclude, mountpoint):
            skip = True
        return skip


def should_skip(mountpoint: str, include_mounts: Sequence[str], exclude_mounts: Sequence[str]) -> bool:
    """Functional form of MountFilter.should_skip"""
    return MountFilter(include_mounts, exclude_mounts).should_skip(mountpoint)
