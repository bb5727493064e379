"""
Exporters Module - metrics collection for nfsmon

Structure:
    exporters/
    - metrics/            # Metrics exporters
      - base.py           # MetricPoint, MetricRecord, MetricsExporter base class
      - nfs_fields.py     # Positional field tables for mountstats lines
      - mount_filter.py   # Include/exclude mount point patterns
      - mountstats.py     # Mountstats line scanner and decoder
      - nfsclient.py      # NFS client exporter
      - manager.py        # Config-driven exporter registry
    - utils.py            # Source paths and availability checks
"""

from .metrics import (
    MetricPoint,
    MetricRecord,
    MetricsExporter,
    NFSClientExporter,
    MetricsCollectorManager,
)

from .utils import (
    get_mountstats_path,
    is_mountstats_available,
)

__all__ = [
    # Metrics base classes
    'MetricPoint',
    'MetricRecord',
    'MetricsExporter',

    # Metrics exporters
    'NFSClientExporter',

    # Metrics manager
    'MetricsCollectorManager',

    # Utility functions
    'get_mountstats_path',
    'is_mountstats_available',
]
