import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, Dict, List


@dataclass
class MetricPoint:
    """Single metric data point"""
    name: str
    value: int
    labels: Dict[str, str] = None
    timestamp: int = None

    def __post_init__(self):
        if self.labels is None:
            self.labels = {}
        if self.timestamp is None:
            self.timestamp = int(time.time())


@dataclass(frozen=True)
class MetricRecord:
    """
    One decoded statistics line: a measurement with its tags and fields.

    Created once per matching line and handed straight to a sink.
    """
    measurement: str
    tags: Dict[str, str]
    fields: Dict[str, int] = field(default_factory=dict)

    def to_points(self, timestamp: int = None) -> List[MetricPoint]:
        """Flatten into one MetricPoint per field, named <measurement>_<field>"""
        return [
            MetricPoint(f"{self.measurement}_{name}", value, dict(self.tags), timestamp)
            for name, value in self.fields.items()
        ]


# Receives each record as soon as it is decoded
MetricSink = Callable[[MetricRecord], None]


class MetricsExporter(ABC):
    """
    A source of MetricPoints polled by MetricsCollectorManager.

    Subclasses implement collect(). is_available() is asked once, during
    construction, and an exporter that says no is never polled.
    """

    def __init__(self, name: str, logger: logging.Logger = logging.getLogger(__name__)):
        self.name = name
        self.enabled = True
        self.logger = logger
        self.available = self.is_available()
        self.last_collection = 0

        if not self.available:
            self.logger.info(f"{self.name}: no statistics source on this host, exporter off")

    def is_available(self) -> bool:
        return True

    @abstractmethod
    async def collect(self) -> List[MetricPoint]:
        """One pass over the source"""

    async def safe_collect(self) -> List[MetricPoint]:
        """collect(), timed; any exception is logged and yields an empty pass"""
        if not self.enabled:
            return []

        try:
            start_time = time.time()
            metrics = await self.collect()
            elapsed = time.time() - start_time

            self.logger.debug(f"{self.name}: {len(metrics)} points in {elapsed:.2f}s")
            self.last_collection = time.time()
            return metrics

        except Exception as e:
            self.logger.error(f"{self.name}: pass aborted: {e}")
            return []
