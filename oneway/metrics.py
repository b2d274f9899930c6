"""
Prometheus metrics for OneWay containers.

Metrics are no-ops until init_metrics() is called, so library users that do
not care about observability pay nothing beyond a None check.

Environment Variables:
    ONEWAY_METRICS_ENABLED: Enable metrics server (true/false) - default: false
    ONEWAY_METRICS_PORT: HTTP port for /metrics endpoint - default: 8080

Usage:
    from oneway.metrics import start_metrics_server, track_action

    start_metrics_server(enabled=True, port=8080)
    track_action("TodoFeature", "action")
"""

import logging
import threading

from prometheus_client import Counter, Gauge, start_http_server

logger = logging.getLogger(__name__)

# Metrics registry (module-level, thread-safe)
ACTIONS_TOTAL: "Counter" = None  # type: ignore
COMMITS_TOTAL: "Counter" = None  # type: ignore
EFFECT_FAILURES_TOTAL: "Counter" = None  # type: ignore
ACTIVE_SUBSCRIPTIONS: "Gauge" = None  # type: ignore

_metrics_initialized = False
_metrics_lock = threading.Lock()


def init_metrics() -> None:
    """
    Initialize Prometheus metrics (safe to call more than once).

    Thread-safe via module-level lock.
    """
    global ACTIONS_TOTAL, COMMITS_TOTAL, EFFECT_FAILURES_TOTAL, ACTIVE_SUBSCRIPTIONS
    global _metrics_initialized

    with _metrics_lock:
        if _metrics_initialized:
            return

        # Dispatch counter (labels: feature, kind=action|cancel)
        ACTIONS_TOTAL = Counter(
            "oneway_actions_total",
            "Total number of actions sent to containers",
            labelnames=["feature", "kind"],
        )

        COMMITS_TOTAL = Counter(
            "oneway_commits_total",
            "Total number of states committed and published to observers",
            labelnames=["feature"],
        )

        EFFECT_FAILURES_TOTAL = Counter(
            "oneway_effect_failures_total",
            "Effect handler failures absorbed by containers",
            labelnames=["feature"],
        )

        ACTIVE_SUBSCRIPTIONS = Gauge(
            "oneway_active_subscriptions",
            "In-flight effect subscriptions",
            labelnames=["feature"],
        )

        _metrics_initialized = True
        logger.info("Prometheus metrics initialized")


def start_metrics_server(enabled: bool, port: int) -> None:
    """
    Start Prometheus metrics HTTP server in background thread.

    Args:
        enabled: Whether to start metrics server (from ONEWAY_METRICS_ENABLED)
        port: HTTP port for /metrics endpoint (from ONEWAY_METRICS_PORT)
    """
    if not enabled:
        logger.debug("Metrics server disabled (ONEWAY_METRICS_ENABLED=false)")
        return

    init_metrics()

    try:
        # start_http_server is non-blocking (starts daemon thread)
        start_http_server(port, addr="0.0.0.0")
        logger.info(f"Metrics server started on http://0.0.0.0:{port}/metrics")
    except OSError as e:
        logger.error(f"Failed to start metrics server: {e}")


def track_action(feature: str, kind: str) -> None:
    if ACTIONS_TOTAL is not None:
        ACTIONS_TOTAL.labels(feature=feature, kind=kind).inc()


def track_commit(feature: str) -> None:
    if COMMITS_TOTAL is not None:
        COMMITS_TOTAL.labels(feature=feature).inc()


def track_effect_failure(feature: str) -> None:
    if EFFECT_FAILURES_TOTAL is not None:
        EFFECT_FAILURES_TOTAL.labels(feature=feature).inc()


def set_active_subscriptions(feature: str, count: int) -> None:
    """
    Set the number of in-flight effect subscriptions for a feature.

    Containers sharing a feature id report into the same series; the last
    writer wins.
    """
    if ACTIVE_SUBSCRIPTIONS is not None:
        ACTIVE_SUBSCRIPTIONS.labels(feature=feature).set(count)
