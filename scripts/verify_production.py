#!/usr/bin/env python3
"""Production smoke test for the meeting API.

Usage:
    python scripts/verify_production.py --backend-url https://api.example.com

Checks /health/ready, then saves a throwaway meeting with POST, reads it
back, replaces it with PUT and reads it again. Exit code 0 if all checks
pass, 1 if any fail.
"""

import argparse
import sys
import uuid
from typing import Tuple

import httpx

TIMEOUT = 15.0

SMOKE_MEETING = {"title": "Smoke test", "times": {"2024-01-01-09:00": ["Alice"]}}
SMOKE_UPDATE = {"title": "Smoke test", "times": {"2024-01-01-09:00": ["Alice", "Bob"]}}


def check_health(url: str) -> Tuple[bool, str]:
    """Verify backend /health/ready returns HTTP 200 with healthy status."""
    health_url = url.rstrip("/") + "/health/ready"
    try:
        response = httpx.get(health_url, timeout=TIMEOUT, follow_redirects=True)
        if response.status_code != 200:
            return False, f"HTTP {response.status_code}"

        try:
            data = response.json()
        except Exception:
            return False, "Response is not valid JSON"

        status = data.get("status", "unknown")
        if status == "ready":
            return True, "All checks healthy"
        return False, f"Status: {status}"

    except httpx.TimeoutException:
        return False, "Request timed out"
    except httpx.ConnectError as exc:
        return False, f"Connection failed: {exc}"
    except httpx.HTTPError as exc:
        return False, f"HTTP error: {exc}"


def check_save_and_load(url: str, guid: str, method: str, body: dict) -> Tuple[bool, str]:
    """Save ``body`` with ``method`` and confirm GET returns it unchanged."""
    meeting_url = url.rstrip("/") + f"/api/meeting/{guid}"
    try:
        response = httpx.request(method, meeting_url, json=body, timeout=TIMEOUT)
        if response.status_code != 200:
            return False, f"{method} returned HTTP {response.status_code}"
        if response.json() != body:
            return False, f"{method} did not echo the body"

        response = httpx.get(meeting_url, timeout=TIMEOUT)
        if response.status_code != 200:
            return False, f"GET returned HTTP {response.status_code}"
        if response.json() != body:
            return False, "GET returned a different record"
        return True, f"{method} + GET round-trip ok"

    except httpx.TimeoutException:
        return False, "Request timed out"
    except httpx.ConnectError as exc:
        return False, f"Connection failed: {exc}"
    except httpx.HTTPError as exc:
        return False, f"HTTP error: {exc}"


def print_results(results: list) -> None:
    """Print a formatted table of check results."""
    header = f"{'CHECK':<25} {'STATUS':<10} {'DETAIL'}"
    separator = "-" * 70
    print()
    print(separator)
    print(header)
    print(separator)
    for name, passed, detail in results:
        status = "PASS" if passed else "FAIL"
        print(f"{name:<25} {status:<10} {detail}")
    print(separator)
    print()


def main() -> None:
    parser = argparse.ArgumentParser(description="Verify a meeting API deployment")
    parser.add_argument(
        "--backend-url",
        required=True,
        help="URL of the backend API",
    )
    args = parser.parse_args()

    guid = f"smoke-{uuid.uuid4()}"
    results = []

    passed, detail = check_health(args.backend_url)
    results.append(("Health", passed, detail))

    passed, detail = check_save_and_load(args.backend_url, guid, "POST", SMOKE_MEETING)
    results.append(("Create meeting", passed, detail))

    passed, detail = check_save_and_load(args.backend_url, guid, "PUT", SMOKE_UPDATE)
    results.append(("Update meeting", passed, detail))

    print_results(results)
    print(f"Smoke meeting id: {guid}")

    all_passed = all(passed for _, passed, _ in results)
    if all_passed:
        print("All checks passed.")
    else:
        print("Some checks FAILED.")

    sys.exit(0 if all_passed else 1)


if __name__ == "__main__":
    main()
