import argparse
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Any, Optional

import yaml

logger = logging.getLogger(__name__)


@dataclass
class ClientConfig:
    """Client configuration with defaults"""
    server: Optional[str] = None
    token: Optional[str] = None
    interval: int = 10
    log_level: str = "INFO"
    once: bool = False
    exporters: Dict[str, Any] = None
    nfsclient: Dict[str, Any] = None

    def __post_init__(self):
        # Metrics exporters configuration (enable/disable)
        if self.exporters is None:
            self.exporters = {
                "nfsclient": True,
            }

        # NFS client exporter configuration
        if self.nfsclient is None:
            self.nfsclient = {}
        self.nfsclient.setdefault("fullstat", False)
        self.nfsclient.setdefault("include_mounts", [])
        self.nfsclient.setdefault("exclude_mounts", [])
        self.nfsclient.setdefault("mountstats_path", None)

    @classmethod
    def from_file(cls, config_path: Path) -> "ClientConfig":
        """Load configuration from YAML file"""
        if not config_path.exists():
            logger.debug(f"Config file not found: {config_path}, using defaults")
            return cls()

        try:
            with open(config_path, "r") as f:
                data = yaml.safe_load(f) or {}
            logger.debug(f"Loaded config from {config_path}: {data}")
            return cls(**data)
        except Exception as e:
            logger.warning(f"Failed to load config from {config_path}: {e}, using defaults")
            return cls()

    def override_with_args(self, args: argparse.Namespace) -> "ClientConfig":
        """Override config with command line arguments if provided"""
        # Only override if explicitly provided - preserves config file values
        self.server = args.server if args.server is not None else self.server
        self.interval = args.interval if args.interval is not None else self.interval
        self.log_level = args.log_level if args.log_level is not None else self.log_level
        self.once = args.once or self.once

        if args.fullstat:
            self.nfsclient["fullstat"] = True
        if args.include_mounts:
            self.nfsclient["include_mounts"] = list(args.include_mounts)
        if args.exclude_mounts:
            self.nfsclient["exclude_mounts"] = list(args.exclude_mounts)
        if args.mountstats is not None:
            self.nfsclient["mountstats_path"] = args.mountstats
        return self
