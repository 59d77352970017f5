"""Composition root for the suitewire reporting system.

This module is the ONLY location that imports both core domain logic
and concrete adapter implementations. All wiring of dependencies
happens here.

Module Structure:
- Logging configuration
- Transport instantiation
- Aggregator initialization
"""

import logging
import sys
import time
from collections.abc import Callable

from suitewire.adapters.transport.http import HTTPReportTransport, normalize_addr
from suitewire.config import Settings
from suitewire.core.aggregator import SuiteAggregator
from suitewire.core.throttle import ThrottleGate

PACKAGE_LOGGER = "suitewire"


def configure_logging(log_level: str, log_format: str) -> None:
    """Configure reporter logging.

    Diagnostics go to stderr so they never mix with the test run's own
    output. Only the ``suitewire`` logger is touched; the host's root
    logger is left alone.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_format: Log format (json, text).
    """
    level = getattr(logging, log_level, logging.WARNING)

    if log_format == "json":
        format_str = '{"time": "%(asctime)s", "level": "%(levelname)s", "message": "%(message)s"}'
    else:
        format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        if getattr(handler, "_suitewire", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(format_str))
    handler._suitewire = True  # type: ignore[attr-defined]
    logger.addHandler(handler)


def resolve_addr(settings: Settings, override: str | None = None) -> str | None:
    """Pick the collector address, or None if remote reporting is off.

    An explicit override (e.g. a command-line option) always wins.
    Otherwise the address only applies on CI.

    Raises:
        ValueError: If the override is not plain host:port.
    """
    if override and override.strip():
        return normalize_addr(override)
    if settings.remote_report_enabled:
        return settings.remote_test_out_addr
    return None


def create_reporter(
    settings: Settings,
    addr: str,
    clock: Callable[[], float] = time.monotonic,
) -> SuiteAggregator:
    """Wire a transport and throttle gate into a fresh aggregator.

    Args:
        settings: Loaded reporter settings.
        addr: Collector address in ``host:port`` form.
        clock: Monotonic clock used by the throttle gate.

    Returns:
        A single-use aggregator for one suite run.
    """
    logger = logging.getLogger(__name__)

    transport = HTTPReportTransport(
        addr=addr,
        timeout_seconds=settings.request_timeout_seconds,
    )
    gate = ThrottleGate(
        interval_seconds=settings.update_interval_seconds,
        clock=clock,
    )
    logger.info(f"Reporting suite results to {transport.url}")
    return SuiteAggregator(transport=transport, gate=gate)
