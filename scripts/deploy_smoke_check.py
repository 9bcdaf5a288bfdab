"""Post-deploy smoke checks executed from the app container."""

from __future__ import annotations

import json
import os
import urllib.error
import urllib.request

BASE_URL = os.getenv("SMOKE_BASE_URL", "http://localhost:8000").rstrip("/")
API_PREFIX = os.getenv("API_PREFIX", "/api/v1")


def request(
    path: str,
    *,
    method: str = "GET",
    headers: dict[str, str] | None = None,
    expected: int = 200,
) -> bytes:
    req_headers = {"Accept": "application/json"}
    if headers:
        req_headers.update(headers)

    request_obj = urllib.request.Request(
        f"{BASE_URL}{path}",
        method=method,
        headers=req_headers,
    )
    try:
        with urllib.request.urlopen(request_obj, timeout=30) as response:
            content = response.read()
            status = response.getcode()
    except urllib.error.HTTPError as exc:  # pragma: no cover - runtime smoke script
        if exc.code == expected:
            return exc.read()
        body_text = exc.read().decode("utf-8", errors="ignore")
        raise RuntimeError(f"{method} {path} -> {exc.code}: {body_text}") from exc

    if status != expected:
        raise RuntimeError(f"{method} {path} -> {status}, expected {expected}")
    return content


def main() -> None:
    for endpoint in ["/health", "/ready", "/docs", "/metrics"]:
        request(endpoint, expected=200)

    services = json.loads(request(f"{API_PREFIX}/catalog/services").decode("utf-8"))
    if not services:
        raise RuntimeError("Service catalog is empty")

    # Protected routes must be rejected before reaching any handler.
    request(f"{API_PREFIX}/admin/bookings", expected=401)
    request(f"{API_PREFIX}/worker/jobs/available", expected=401)

    token = os.getenv("SMOKE_WORKER_TOKEN")
    if token:
        request(
            f"{API_PREFIX}/worker/jobs/available",
            headers={"Authorization": f"Bearer {token}"},
            expected=200,
        )

    print("Smoke checks passed.")


if __name__ == "__main__":
    main()
