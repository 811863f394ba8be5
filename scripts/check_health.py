#!/usr/bin/env python3
"""Deployment health checks for the lantern backend."""

from __future__ import annotations

import os
import time
from typing import Any, Callable, Optional

import httpx


def fail(message: str) -> None:
    print(f"ERROR: {message}")
    raise SystemExit(1)


def normalize_base_url(base_url: str) -> str:
    url = (base_url or "").strip().rstrip("/")
    for suffix in ("/api/v1", "/api"):
        if url.endswith(suffix):
            return url[: -len(suffix)]
    return url


def _expect_status(expected: str) -> Callable[[dict[str, Any]], Optional[str]]:
    def check(body: dict[str, Any]) -> Optional[str]:
        actual = body.get("status")
        if actual != expected:
            return f"status mismatch: expected '{expected}', got '{actual}'"
        return None

    return check


def _expect_lantern_info(body: dict[str, Any]) -> Optional[str]:
    data = body.get("data") or {}
    if "round" not in data or "activeStations" not in data:
        return "lantern info is missing round or stations"
    return None


def check_endpoint(
    client: httpx.Client,
    path: str,
    check: Callable[[dict[str, Any]], Optional[str]],
    *,
    retries: int,
    retry_delay: float,
) -> None:
    last_error = None

    for attempt in range(retries + 1):
        try:
            response = client.get(path)
            if response.status_code != 200:
                last_error = f"{path} returned HTTP {response.status_code}. Body: {response.text}"
            else:
                problem = check(response.json())
                if problem is None:
                    print(f"OK: {path}")
                    return
                last_error = f"{path} {problem}"
        except (httpx.HTTPError, ValueError) as exc:
            last_error = f"{path} request failed: {exc}"

        if attempt < retries:
            wait = retry_delay * (attempt + 1)
            print(f"WARN: {last_error} (retry {attempt + 1}/{retries} in {wait:.1f}s)")
            time.sleep(wait)

    fail(last_error or f"{path} failed")


def main() -> None:
    base_url = normalize_base_url(os.getenv("BACKEND_BASE_URL", ""))
    if not base_url:
        fail("Missing BACKEND_BASE_URL environment variable.")

    timeout = int(os.getenv("HEALTHCHECK_TIMEOUT_SECONDS", "25"))
    retries = int(os.getenv("HEALTHCHECK_RETRIES", "4"))
    retry_delay = float(os.getenv("HEALTHCHECK_RETRY_DELAY_SECONDS", "4"))
    print(f"Healthcheck config: base_url={base_url} timeout={timeout}s retries={retries}")

    with httpx.Client(base_url=base_url, timeout=timeout, headers={"User-Agent": "lantern-healthcheck/1.0"}) as client:
        check_endpoint(client, "/healthz", _expect_status("ok"), retries=retries, retry_delay=retry_delay)
        check_endpoint(client, "/readyz", _expect_status("ready"), retries=retries, retry_delay=retry_delay)
        check_endpoint(client, "/api/v1/lanternInfo", _expect_lantern_info, retries=retries, retry_delay=retry_delay)
    print("SUCCESS: all health checks passed.")


if __name__ == "__main__":
    main()
