"""NFS client metrics exporter.

Reads per-mount NFS statistics from /proc/self/mountstats (or $MOUNT_PROC).
"""

import logging
import sys
import time
from typing import Dict, List, Optional

from .base import MetricsExporter, MetricPoint, MetricRecord, MetricSink
from .mountstats import MountstatsParser, MountstatsReadError
from ..utils import DEFAULT_MOUNTSTATS_PATH, get_mountstats_path, is_mountstats_available


class NFSClientExporter(MetricsExporter):
    """
    NFS client exporter

    Always emits, per mount (labels: mountpoint, serverexport):
      - nfsstat_read_{ops,retrans,bytes,rtt,exe}
      - nfsstat_write_{ops,retrans,bytes,rtt,exe}

    With fullstat enabled, also:
      - nfs_events_*      (27 VFS event counters)
      - nfs_bytes_*       (8 byte/page counters)
      - nfs_xprt_tcp_* / nfs_xprt_udp_*
      - nfs_ops_<OP>_*    (per-operation RPC counters)

    Config keys:
      fullstat:        collect the low-level tables above (default false)
      include_mounts:  regex list; if set, only matching mount points are read
      exclude_mounts:  regex list; matching mount points are never read
      mountstats_path: file to read instead of $MOUNT_PROC or /proc/self/mountstats
    """

    def __init__(self, logger: Optional[logging.Logger] = None, config: Optional[Dict] = None):
        self.config = config or {}
        self.path = self.config.get("mountstats_path") or get_mountstats_path()
        self.parser = MountstatsParser(
            fullstat=bool(self.config.get("fullstat", False)),
            include_mounts=self.config.get("include_mounts") or [],
            exclude_mounts=self.config.get("exclude_mounts") or [],
        )
        super().__init__("nfsclient", logger or logging.getLogger("nfsclient-metrics"))

        # collect() logs a read error on each pass until the file appears
        if self.available and not is_mountstats_available(self.path):
            self.logger.warning(f"{self.path} is not readable yet")

    def is_available(self) -> bool:
        """An explicitly configured path is always polled; the default one only exists on Linux"""
        return self.path != DEFAULT_MOUNTSTATS_PATH or sys.platform.startswith("linux")

    def gather(self, sink: MetricSink) -> int:
        """Run one scan of the mountstats file. Raises MountstatsReadError."""
        return self.parser.parse_file(self.path, sink)

    async def collect(self) -> List[MetricPoint]:
        metrics: List[MetricPoint] = []
        timestamp = int(time.time())

        def sink(record: MetricRecord) -> None:
            metrics.extend(record.to_points(timestamp))

        try:
            count = self.gather(sink)
            self.logger.debug(f"{self.path}: decoded {count} records")
        except MountstatsReadError as e:
            self.logger.error(f"Mountstats read error: {e}")

        return metrics
