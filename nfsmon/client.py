#!/usr/bin/env python3
"""
nfsmon client

Flow:
- Load config.yml (if present), then apply command line overrides
- Every --interval seconds:
    * scan /proc/self/mountstats (or $MOUNT_PROC) into per-mount NFS metrics
    * POST /api/metrics to --server, or print JSON lines to stdout without one
- --once collects a single sample and exits
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List
from urllib.error import HTTPError, URLError

from .config import ClientConfig
from .exporters import MetricsCollectorManager
from .http_client import NfsMonHttpClient


logger = logging.getLogger(__name__)


def write_metrics(batch: List[Dict[str, Any]], stream=None) -> None:
    """Write one JSON object per metric"""
    stream = stream or sys.stdout
    for metric in batch:
        stream.write(json.dumps(metric, sort_keys=True) + "\n")
    stream.flush()


async def metrics_loop(config: ClientConfig, metrics_collector: MetricsCollectorManager) -> None:
    """Main metrics collection loop."""
    http_client = NfsMonHttpClient(config.server) if config.server else None
    if http_client:
        logger.info("metrics loop starting; posting to %s every %ss", config.server, config.interval)
    else:
        logger.info("metrics loop starting; writing to stdout every %ss", config.interval)
    connection_failed = False

    while True:
        try:
            batch = await metrics_collector.collect_metrics()
            if not batch:
                logger.warning("no metrics collected")

            if http_client:
                res = http_client.send_metrics(batch, config.token)
                logger.debug("sent metrics: %s", res)

                if connection_failed:
                    logger.info("successfully reconnected to server: %s", config.server)
                    connection_failed = False
            else:
                write_metrics(batch)

        except HTTPError as e:
            connection_failed = True
            try:
                msg = e.read().decode("utf-8")
            except Exception:
                msg = str(e)
            logger.error("HTTP %s error from server: %s", getattr(e, "code", "?"), msg)
        except URLError as e:
            connection_failed = True
            logger.error("failed to reach server: %s", e)
        except Exception as e:
            logger.exception("unexpected error during metrics collection: %s", e)

        if config.once:
            break
        await asyncio.sleep(max(1, config.interval))


async def run_client(config: ClientConfig) -> None:
    """Main client orchestration."""
    metrics_collector = MetricsCollectorManager(config=config.__dict__)
    if not metrics_collector.exporters:
        logger.warning("no exporters available; nothing will be collected")

    await metrics_loop(config, metrics_collector)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="nfsmon client")
    parser.add_argument("--config", "-c", type=Path, default=Path("config.yml"),
                        help="YAML configuration file (default: config.yml)")
    parser.add_argument("--server",
                        help="metrics server base URL (e.g., https://server:8000); stdout if unset")
    parser.add_argument("--interval", type=int,
                        help="seconds between samples")
    parser.add_argument("--once", action="store_true",
                        help="collect one sample and exit")
    parser.add_argument("--fullstat", action="store_true",
                        help="collect events, bytes, transport and per-operation statistics")
    parser.add_argument("--include-mount", dest="include_mounts", action="append",
                        help="regex of mount points to collect (repeatable)")
    parser.add_argument("--exclude-mount", dest="exclude_mounts", action="append",
                        help="regex of mount points to ignore (repeatable)")
    parser.add_argument("--mountstats",
                        help="mountstats file to read (default: $MOUNT_PROC or /proc/self/mountstats)")
    parser.add_argument("--log-level",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="logging level")
    return parser


def main():
    args = build_parser().parse_args()

    # Load config: YAML first, then CLI overrides
    config = ClientConfig.from_file(args.config).override_with_args(args)

    # Logs go to stderr so stdout stays clean for metrics
    logging.basicConfig(level=getattr(logging, config.log_level))
    logger.info(f"nfsmon client starting with config: server={config.server}, interval={config.interval}s")

    try:
        asyncio.run(run_client(config))
    except KeyboardInterrupt:
        print("\nInterrupted. Bye!", file=sys.stderr)


if __name__ == "__main__":
    main()
