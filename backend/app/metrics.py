"""
In-process counters for observability. Process-local; for multi-worker use external metrics (e.g. Prometheus).
"""
import threading

_counters: dict[str, int] = {
    "login_failures_total": 0,
    "documents_uploaded_total": 0,
    "documents_approved_total": 0,
    "documents_rejected_total": 0,
}
_lock = threading.Lock()


def increment(name: str) -> int:
    """Increment counter `name`; return new value. Thread-safe."""
    with _lock:
        _counters[name] = _counters.get(name, 0) + 1
        return _counters[name]


def snapshot() -> dict[str, int]:
    """Copy of all counters (for /health)."""
    with _lock:
        return dict(_counters)
