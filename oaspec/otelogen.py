"""Names and attributes used for tracing and metrics of generated code."""

from __future__ import annotations

NAME = "oaspec"

CLIENT_REQUEST_COUNT = "oaspec.client.request_count"  # outgoing request count total
CLIENT_ERRORS_COUNT = "oaspec.client.errors_count"  # outgoing errors total
CLIENT_DURATION = "oaspec.client.duration"  # outgoing end to end duration, microseconds

SERVER_REQUEST_COUNT = "oaspec.server.request_count"  # incoming request count total
SERVER_ERRORS_COUNT = "oaspec.server.errors_count"  # incoming errors total
SERVER_DURATION = "oaspec.server.duration"  # incoming end to end duration, microseconds

OPERATION_ID_KEY = "oas.operation"

_VERSION = "0.2.0"


def operation_id(value: str) -> tuple[str, str]:
    """Attribute carrying the operation identifier, as a key/value pair."""
    return (OPERATION_ID_KEY, value)


def version() -> str:
    """Release version of the instrumentation."""
    return _VERSION


def sem_version() -> str:
    """Semantic version string supplied when creating tracers and meters."""
    return "semver:" + version()