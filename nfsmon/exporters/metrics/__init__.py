"""Metrics exporters package - collects NFS client metrics"""

from .base import MetricPoint, MetricRecord, MetricSink, MetricsExporter
from .mount_filter import MountFilter
from .mountstats import MountContext, MountstatsParser, MountstatsReadError
from .nfsclient import NFSClientExporter
from .manager import MetricsCollectorManager

__all__ = [
    # Base classes
    'MetricPoint',
    'MetricRecord',
    'MetricSink',
    'MetricsExporter',

    # Mountstats parsing
    'MountContext',
    'MountFilter',
    'MountstatsParser',
    'MountstatsReadError',

    # Exporters
    'NFSClientExporter',

    # Manager
    'MetricsCollectorManager',
]
