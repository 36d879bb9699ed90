"""
zfs-telemetry CLI entry point.
"""

import argparse
import asyncio
import logging
import sys

from zfs_telemetry.config import ConfigError, ExporterConfig
from zfs_telemetry.logging_config import setup_logging
from zfs_telemetry.telemetry import (
    ServiceChecker,
    SubprocessRunner,
    ZFSClient,
    ZFSTelemetryOrchestrator,
)


def build_orchestrator(config: ExporterConfig) -> ZFSTelemetryOrchestrator:
    """Wire the production runner, collectors and orchestrator."""
    runner = SubprocessRunner()
    return ZFSTelemetryOrchestrator(
        client=ZFSClient(runner, zpool_path=config.zpool_path, zfs_path=config.zfs_path),
        service_checker=ServiceChecker(runner),
        services=config.service_units(),
        timeout_seconds=config.scrape_timeout,
    )


async def collect_once(orchestrator: ZFSTelemetryOrchestrator) -> int:
    """Collect one snapshot and print it as JSON."""
    snapshot = await orchestrator.collect_snapshot()
    print(snapshot.model_dump_json(indent=2))
    return 0 if snapshot.up else 1


def serve(config: ExporterConfig, orchestrator: ZFSTelemetryOrchestrator) -> None:
    """Serve metrics over HTTP until interrupted."""
    import uvicorn

    from zfs_telemetry.telemetry.api import create_app

    app = create_app(orchestrator, metrics_path=config.metrics_path)
    uvicorn.run(app, host=config.listen_host, port=config.listen_port, log_level="warning")


def main() -> int:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="zfs-telemetry - ZFS pool and service metrics")

    parser.add_argument(
        "--config",
        "-c",
        type=str,
        default="/etc/zfs-telemetry/config.yml",
        help="Path to configuration file",
    )

    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")

    parser.add_argument(
        "--generate-config",
        action="store_true",
        help="Generate default configuration file and exit",
    )

    parser.add_argument(
        "--validate-config", action="store_true", help="Validate configuration file and exit"
    )

    parser.add_argument(
        "--once", action="store_true", help="Collect one snapshot, print it as JSON and exit"
    )

    args = parser.parse_args()

    if args.generate_config:
        config = ExporterConfig()
        config.save(args.config)
        print(f"Generated default configuration at: {args.config}")
        return 0

    try:
        config = ExporterConfig.from_file(args.config).apply_environment()
    except (ConfigError, ValueError) as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 1

    setup_logging(
        console_level="DEBUG" if args.verbose else config.log_level,
        log_dir=config.log_dir,
        use_json=config.log_json,
    )
    logger = logging.getLogger(__name__)

    try:
        config.validate_binaries()
    except ConfigError as e:
        logger.error(f"Configuration validation failed: {e}")
        return 1

    if args.validate_config:
        print(f"Configuration is valid: {args.config}")
        return 0

    orchestrator = build_orchestrator(config)

    if args.once:
        return asyncio.run(collect_once(orchestrator))

    logger.info(
        f"Starting zfs-telemetry on {config.listen_host}:{config.listen_port}"
        f"{config.metrics_path} (zpool={config.zpool_path}, zfs={config.zfs_path}, "
        f"services={','.join(orchestrator.services)})"
    )
    serve(config, orchestrator)
    logger.info("zfs-telemetry stopped")
    return 0


if __name__ == "__main__":
    sys.exit(main())
