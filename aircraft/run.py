#!/usr/bin/env python3
"""
Entry point for the simulated delivery aircraft.
"""

import argparse
import logging
import sys

from prometheus_client import start_http_server

from aircraft.cargo_client import CargoClient
from aircraft.config import load_config, AircraftConfig, LOG_LEVEL
from aircraft.errors import FatalError
from aircraft.models import AircraftState, Position
from aircraft.orders_client import OrdersClient
from aircraft.simulator import AircraftSimulator
from aircraft.telemetry_client import TelemetryClient

logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Simulated delivery aircraft")
    parser.add_argument("--host", help="Base host of the telemetry, ATC and cargo services")
    parser.add_argument("--name", help="Aircraft callsign / network identifier")
    parser.add_argument("--uuid", help="Fleet uuid used when polling for orders")
    parser.add_argument("--scanner-id", dest="scanner_id", help="Parcel scanner id")
    parser.add_argument("--longitude", dest="initial_longitude", type=float, help="Start longitude")
    parser.add_argument("--latitude", dest="initial_latitude", type=float, help="Start latitude")
    parser.add_argument("--metrics-port", dest="metrics_port", type=int, help="Prometheus port (0 disables)")
    parser.add_argument("--log-level", dest="log_level", help="Root log level")
    return parser.parse_args(argv)


def build_simulator(config: AircraftConfig) -> AircraftSimulator:
    state = AircraftState(
        identifier=config.name,
        scanner_id=config.scanner_id,
        position=Position(config.initial_longitude, config.initial_latitude, 0.0),
    )
    return AircraftSimulator(
        state,
        telemetry=TelemetryClient(config.telemetry_url, timeout=config.request_timeout_s),
        orders=OrdersClient(config.atc_url, timeout=config.request_timeout_s),
        cargo=CargoClient(config.cargo_url, timeout=config.request_timeout_s),
        fleet_uuid=config.uuid,
        tick_interval_ms=config.tick_interval_ms,
        fallback_speed_m_s=config.fallback_ground_speed_m_s,
    )


def main(argv=None) -> int:
    args = parse_args(argv)

    logging.basicConfig(
        level=(args.log_level or LOG_LEVEL).upper(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stdout
    )

    try:
        config = load_config(**vars(args))
    except ValueError as e:
        logger.critical(f"invalid configuration: {e}")
        return 2

    logger.info("=" * 50)
    logger.info("Simulated Delivery Aircraft")
    logger.info(f"Aircraft: {config.name} (fleet uuid {config.uuid}, scanner {config.scanner_id})")
    logger.info(f"Start: ({config.initial_longitude}, {config.initial_latitude})")
    logger.info(f"Telemetry: {config.telemetry_url}")
    logger.info(f"ATC: {config.atc_url}")
    logger.info(f"Cargo: {config.cargo_url}")
    logger.info(f"Tick interval: {config.tick_interval_ms}ms")
    logger.info("=" * 50)

    if config.metrics_port:
        start_http_server(config.metrics_port)
        logger.info(f"Prometheus metrics available on :{config.metrics_port}")

    simulator = build_simulator(config)

    try:
        simulator.run()
    except FatalError as e:
        logger.critical(f"({config.name}) stopping: {e}")
        return 1
    except KeyboardInterrupt:
        logger.info("Shutdown requested")

    return 0


if __name__ == "__main__":
    sys.exit(main())
