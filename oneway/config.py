"""
Runtime configuration read from the environment.
"""

import os
from dataclasses import dataclass


def _flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class OneWayConfig:
    """
    Fields:
        log_level: Root log level name
        log_format: "json" or "text"
        trace_all: Trace every send regardless of the per-call flag
        metrics_enabled: Start the Prometheus metrics server
        metrics_port: Port for the metrics server
    """
    log_level: str = "INFO"
    log_format: str = "json"
    trace_all: bool = False
    metrics_enabled: bool = False
    metrics_port: int = 8080

    @staticmethod
    def from_env() -> "OneWayConfig":
        return OneWayConfig(
            log_level=os.getenv("ONEWAY_LOG_LEVEL", "INFO").upper(),
            log_format=os.getenv("ONEWAY_LOG_FORMAT", "json").lower(),
            trace_all=_flag("ONEWAY_TRACE_ALL"),
            metrics_enabled=_flag("ONEWAY_METRICS_ENABLED", "false"),
            metrics_port=int(os.getenv("ONEWAY_METRICS_PORT", "8080")),
        )
