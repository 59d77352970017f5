"""HTTP transport adapter.

Implements ReportTransportPort by POSTing JSON suite messages to
``http://<addr>/report-suite``. Only the status code of the response
matters; 200, 201 and 202 mean the collector took ownership of the cases
in the message.
"""

import json
import logging
from datetime import timedelta
from typing import Any

import httpx

from suitewire.core.errors import ReportDeliveryError, ReportSerializationError
from suitewire.core.models import (
    FailureInfo,
    Location,
    PartStatus,
    StatusComponent,
    SuiteMessage,
    SuiteReport,
    SuiteStats,
)
from suitewire.core.ports import ReportTransportPort

logger = logging.getLogger(__name__)

REPORT_PATH = "/report-suite"
ACCEPTED_STATUS_CODES = frozenset({200, 201, 202})
DEFAULT_TIMEOUT_SECONDS = 5.0


def normalize_addr(addr: str) -> str:
    """Strip a collector address and check it is plain host:port.

    Raises:
        ValueError: If the address is empty or carries a scheme or path.
    """
    addr = (addr or "").strip()
    if not addr:
        raise ValueError("addr must be a non-empty host:port string")
    if "://" in addr or "/" in addr:
        raise ValueError(
            f"addr must be host:port, without scheme or path: {addr!r}"
        )
    return addr


class HTTPReportTransport(ReportTransportPort):
    """Sends suite messages to a remote collector over HTTP."""

    def __init__(
        self,
        addr: str,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        client: httpx.Client | None = None,
    ):
        """Initialize the HTTP transport.

        Args:
            addr: Collector address in ``host:port`` form.
            timeout_seconds: Upper bound for each request round-trip.
            client: Optional preconfigured client (used in tests).
        """
        self.addr = normalize_addr(addr)
        self.url = f"http://{self.addr}{REPORT_PATH}"
        self.timeout_seconds = timeout_seconds
        self._client = client

    def _get_client(self) -> httpx.Client:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.Client(timeout=self.timeout_seconds)
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def send(self, message: SuiteMessage) -> None:
        """POST a suite message and check that the collector accepted it."""
        action = message.action.value
        body = encode_message(message)

        try:
            response = self._get_client().post(
                self.url,
                content=body,
                headers={"Content-Type": "application/json"},
            )
        except (httpx.HTTPError, httpx.InvalidURL, ValueError, OSError) as e:
            # Name resolution of a malformed host raises UnicodeError (idna)
            raise ReportDeliveryError(
                f"unable to post {action} request: {e}"
            ) from e

        if response.status_code not in ACCEPTED_STATUS_CODES:
            raise ReportDeliveryError(
                f"server did not accept {action} request: "
                f"{response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )

        logger.debug(
            f"Collector accepted {action}: {response.status_code}",
            extra={"url": self.url, "bytes": len(body)},
        )


def encode_message(message: SuiteMessage) -> bytes:
    """Encode a suite message as compact JSON.

    Raises:
        ReportSerializationError: If the message cannot be encoded.
    """
    try:
        payload = {
            "action": message.action.value,
            "suite": _suite_to_dict(message.suite),
        }
        return json.dumps(
            payload, separators=(",", ":"), ensure_ascii=False
        ).encode("utf-8")
    except (TypeError, ValueError, UnicodeError) as e:
        raise ReportSerializationError(
            f"unable to marshal {message.action.value} request: {e}"
        ) from e


def _nanoseconds(duration: timedelta) -> int:
    """Durations travel as integer nanoseconds."""
    return (
        duration.days * 86_400_000_000_000
        + duration.seconds * 1_000_000_000
        + duration.microseconds * 1_000
    )


def _location_to_dict(location: Location) -> dict[str, Any]:
    data: dict[str, Any] = {"file": location.file, "line": location.line}
    if location.stack:
        data["stack"] = location.stack
    return data


def _component_to_dict(component: StatusComponent) -> dict[str, Any]:
    return {
        "text": component.text,
        "location": _location_to_dict(component.location),
    }


def _failure_to_dict(failure: FailureInfo) -> dict[str, Any]:
    data: dict[str, Any] = {
        "message": failure.message,
        "location": _location_to_dict(failure.location),
    }
    if failure.panic:
        data["panic"] = failure.panic
    data["component"] = {
        "type": failure.component.type.value,
        "location": _location_to_dict(failure.component.location),
        "index": failure.component.index,
    }
    return data


def _part_to_dict(part: PartStatus) -> dict[str, Any]:
    data: dict[str, Any] = {
        "components": [_component_to_dict(c) for c in part.components],
        "state": part.state.value,
        "runTime": _nanoseconds(part.run_time),
    }
    if part.failure is not None:
        data["failure"] = _failure_to_dict(part.failure)
    if part.output:
        data["output"] = part.output
    return data


def _stats_to_dict(stats: SuiteStats) -> dict[str, int]:
    return {
        "total": stats.total,
        "pending": stats.pending,
        "skipped": stats.skipped,
        "passed": stats.passed,
        "failed": stats.failed,
        "flakes": stats.flakes,
    }


def _suite_to_dict(suite: SuiteReport) -> dict[str, Any]:
    data: dict[str, Any] = {
        "name": suite.name,
        "id": suite.id,
        "runTime": _nanoseconds(suite.run_time),
    }
    if suite.before_suite is not None:
        data["beforeSuite"] = _part_to_dict(suite.before_suite)
    if suite.after_suite is not None:
        data["afterSuite"] = _part_to_dict(suite.after_suite)
    # Cases are new since the last accepted message; omitted when none
    if suite.more_test_cases:
        data["moreTestCases"] = [_part_to_dict(p) for p in suite.more_test_cases]
    if suite.stats is not None:
        data["stats"] = _stats_to_dict(suite.stats)
    return data
