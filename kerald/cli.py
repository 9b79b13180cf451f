"""Command-line entry point that starts a broker."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from collections.abc import Sequence
from pathlib import Path

from kerald.broker import Broker, BrokerConfig, BrokerError, RejectingUntilCoordinationReady

_VERSION = "0.1.0"
DEFAULT_INTER_BROKER_PORT = 9000
LOG_LEVEL_ENV = "KERALD_LOG"

logger = logging.getLogger("kerald")


def _init_logging() -> None:
    level = logging.INFO
    requested = os.environ.get(LOG_LEVEL_ENV)
    if requested:
        resolved = logging.getLevelName(requested.strip().upper())
        if isinstance(resolved, int):
            level = resolved
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="kerald", description="Kerald broker")
    parser.add_argument("--config", type=Path, default=None, help="configuration file path")
    parser.add_argument("--version", action="version", version=f"kerald {_VERSION}")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Start a broker from the command line and report its state."""
    _init_logging()
    args = _build_parser().parse_args(argv)

    try:
        if args.config is not None:
            config = BrokerConfig.from_path(args.config)
        else:
            config = BrokerConfig.single_node(DEFAULT_INTER_BROKER_PORT)
        broker = asyncio.run(Broker(config).start())
    except BrokerError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    cluster = broker.config.cluster
    logger.info(
        "kerald broker started local_node_id=%s expected_brokers=%d quorum=%d inter_broker_port=%d",
        broker.local_node_id,
        cluster.expected_brokers,
        cluster.quorum_size(),
        broker.config.inter_broker.port,
    )

    admission = broker.admission_state
    if isinstance(admission, RejectingUntilCoordinationReady):
        logger.warning("write admission disabled reason=%s", admission.reason)

    return 0


if __name__ == "__main__":
    sys.exit(main())