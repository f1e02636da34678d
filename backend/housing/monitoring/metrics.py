"""In-memory counters for /metrics: request status buckets and road vs straight routes."""
import time
from collections.abc import MutableMapping
from threading import Lock

_start_time = time.monotonic()
_counts: MutableMapping[str, int] = {}
_lock = Lock()


def _bump(bucket: str, amount: int = 1) -> None:
    with _lock:
        _counts[bucket] = _counts.get(bucket, 0) + amount


def record_request(status_code: int) -> None:
    if 200 <= status_code < 300:
        bucket = "2xx"
    elif 400 <= status_code < 500:
        bucket = "4xx"
    elif status_code >= 500:
        bucket = "5xx"
    else:
        bucket = "other"
    _bump(bucket)


def record_routes(road: int, straight: int) -> None:
    _bump("routes_road", road)
    _bump("routes_straight", straight)


def get_metrics() -> dict:
    with _lock:
        counts = dict(_counts)
    requests_total = sum(counts.get(b, 0) for b in ("2xx", "4xx", "5xx", "other"))
    return {
        "requests_total": requests_total,
        "requests_2xx": counts.get("2xx", 0),
        "requests_4xx": counts.get("4xx", 0),
        "requests_5xx": counts.get("5xx", 0),
        "routes_road": counts.get("routes_road", 0),
        "routes_straight": counts.get("routes_straight", 0),
        "uptime_seconds": round(time.monotonic() - _start_time, 1),
    }
