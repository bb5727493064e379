"""Metrics Collector Manager - Coordinates all metrics collection"""
import logging
from typing import Any, Dict, List, Optional

from .nfsclient import NFSClientExporter


class MetricsCollectorManager:
    """Manages metrics collection from all configured exporters"""

    # Registry mapping config keys to exporter classes
    EXPORTER_REGISTRY = {
        "nfsclient": NFSClientExporter,
    }

    def __init__(self, config: Optional[Dict] = None):
        """
        Initialize metrics exporters based on configuration.

        Args:
            config: Configuration dictionary from ClientConfig
        """
        self.config = config or {}
        self.logger = logging.getLogger("nfsmon.metrics_collector")

        exporter_config = self.config.get("exporters") or {}

        self.logger.info("Initializing metrics exporters from config...")
        self.exporters = []

        for exporter_key, exporter_class in self.EXPORTER_REGISTRY.items():
            if not exporter_config.get(exporter_key, True):
                self.logger.debug(f"Skipping disabled exporter: {exporter_key}")
                continue

            try:
                # Each exporter reads its options from the config section named after it
                exporter = exporter_class(config=self.config.get(exporter_key) or {})

                if exporter.available:
                    self.exporters.append(exporter)
                    self.logger.info(f"Enabled exporter: {exporter_key}")
                else:
                    self.logger.debug(f"Exporter {exporter_key} not available on this system")

            except Exception as e:
                self.logger.warning(f"Failed to initialize exporter {exporter_key}: {e}")
                continue

        self.logger.info(f"Initialized {len(self.exporters)} metrics exporters")

    async def collect_metrics(self) -> List[Dict[str, Any]]:
        """
        Collect metrics from all initialized exporters.

        Returns:
            List of metric dicts in the metrics endpoint's schema
        """
        all_metrics = []

        for exporter in self.exporters:
            try:
                exporter_metrics = await exporter.safe_collect()

                for metric in exporter_metrics:
                    all_metrics.append({
                        "timestamp": metric.timestamp,
                        "metric_name": metric.name,
                        "labels": metric.labels,
                        "value_type": "int",
                        "value": metric.value,
                    })

            except Exception as e:
                self.logger.warning(f"Failed to collect metrics from {exporter.__class__.__name__}: {e}")
                continue

        return all_metrics
