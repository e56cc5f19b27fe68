#!/usr/bin/env python3
"""Task Tracker Dashboard Health Check: verify the dashboard and its upstreams.

Checks:
  1. Dashboard responds on /api/health (HTTP 200, status "healthy")
  2. The remote Task Tracker API answers HTTP at all
  3. The stored credentials file is readable and holds a session
  4. Object storage answers HTTP (photos and leave documents)

Usage:
    python scripts/healthcheck.py                                  # http://localhost:8000
    python scripts/healthcheck.py --url https://dashboard.example.com
    python scripts/healthcheck.py --api-url https://api.example.com/api --skip-storage
    python scripts/healthcheck.py --json                           # machine-readable output

Exit codes:
    0 = all checks passed
    1 = one or more checks failed
"""

from __future__ import annotations

import argparse
import json
import sys
from datetime import datetime, timezone
from pathlib import Path

import requests
from dotenv import dotenv_values

# ══════════════════════════════════════════════════════════════════════
# Check result model
# ══════════════════════════════════════════════════════════════════════


class CheckResult:
    """Single health check result."""

    def __init__(self, name: str, passed: bool, message: str,
                 detail: str = "", severity: str = "error"):
        self.name = name
        self.passed = passed
        self.message = message
        self.detail = detail
        self.severity = severity  # "error", "warning", "info"

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "passed": self.passed,
            "message": self.message,
            "detail": self.detail,
            "severity": self.severity,
        }

    def __str__(self) -> str:
        icon = "OK  " if self.passed else ("WARN" if self.severity == "warning" else "FAIL")
        s = f"[{icon}] {self.name}: {self.message}"
        if self.detail:
            s += f"\n       {self.detail}"
        return s


# ══════════════════════════════════════════════════════════════════════
# Health checks
# ══════════════════════════════════════════════════════════════════════

def check_dashboard(base_url: str, timeout: int = 10) -> CheckResult:
    """Check that the dashboard /api/health responds correctly."""
    health_url = f"{base_url.rstrip('/')}/api/health"
    try:
        resp = requests.get(health_url, timeout=timeout)
        body = resp.json()
    except requests.exceptions.ConnectionError as e:
        return CheckResult("Dashboard", False, "Cannot connect to dashboard", str(e))
    except (requests.exceptions.RequestException, ValueError) as e:
        return CheckResult("Dashboard", False, f"Health check failed: {type(e).__name__}", str(e))

    if resp.status_code != 200:
        return CheckResult("Dashboard", False, f"HTTP {resp.status_code} (expected 200)", f"URL: {health_url}")
    if body.get("status") != "healthy":
        return CheckResult(
            "Dashboard", False,
            f"Status: {body.get('status', 'missing')} (expected 'healthy')",
            f"Response: {json.dumps(body)}",
        )

    session = f"signed in as {body.get('role')}" if body.get("authenticated") else "no session"
    return CheckResult(
        "Dashboard", True,
        f"Healthy (v{body.get('version', 'unknown')}, {body.get('environment', 'unknown')}, {session})",
        f"Subdomain: {body.get('subdomain')}",
    )


def check_upstream_api(api_url: str, timeout: int = 10) -> CheckResult:
    """Any HTTP answer from the Task Tracker API counts as reachable."""
    try:
        resp = requests.get(api_url, timeout=timeout)
    except requests.exceptions.RequestException as e:
        return CheckResult("Task Tracker API", False, "Cannot reach remote API", str(e))

    if resp.status_code >= 500:
        return CheckResult(
            "Task Tracker API", False,
            f"HTTP {resp.status_code} from remote API",
            f"URL: {api_url}",
        )
    return CheckResult(
        "Task Tracker API", True,
        f"Reachable (HTTP {resp.status_code}, {resp.elapsed.total_seconds():.2f}s)",
        f"URL: {api_url}",
    )


def check_credentials(path: str) -> CheckResult:
    """The persisted token/user/subdomain document."""
    if not path:
        return CheckResult("Credentials", True, "In-memory only (CREDENTIALS_PATH empty)", severity="info")

    file = Path(path)
    if not file.exists():
        return CheckResult(
            "Credentials", True, "No credentials stored yet",
            f"Log in through the dashboard to create {file}", severity="warning",
        )
    try:
        data = json.loads(file.read_text())
    except (OSError, json.JSONDecodeError) as e:
        return CheckResult("Credentials", False, "Credentials file is unreadable", str(e))

    if not data.get("token"):
        return CheckResult("Credentials", True, "No active session", str(file), severity="warning")
    try:
        role = json.loads(data.get("user") or "{}").get("role", "unknown")
    except json.JSONDecodeError:
        return CheckResult("Credentials", False, "Stored user profile is not valid JSON", str(file))
    return CheckResult(
        "Credentials", True,
        f"Session stored (role: {role}, subdomain: {data.get('tasktracker-subdomain', 'main')})",
        str(file),
    )


def check_storage(storage_url: str, timeout: int = 10) -> CheckResult:
    """Object storage endpoint used for photos and documents."""
    if not storage_url:
        return CheckResult(
            "Object Storage", False, "STORAGE_URL is not configured",
            "Photo and document uploads will fail.", severity="warning",
        )
    url = f"{storage_url.rstrip('/')}/storage/v1/"
    try:
        resp = requests.get(url, timeout=timeout)
    except requests.exceptions.RequestException as e:
        return CheckResult("Object Storage", False, "Cannot reach object storage", str(e))
    if resp.status_code >= 500:
        return CheckResult("Object Storage", False, f"HTTP {resp.status_code}", f"URL: {url}")
    return CheckResult("Object Storage", True, f"Reachable (HTTP {resp.status_code})", f"URL: {url}")


# ══════════════════════════════════════════════════════════════════════
# Runner
# ══════════════════════════════════════════════════════════════════════

def run_healthcheck(
    url: str,
    env: dict,
    api_url: str | None = None,
    skip_storage: bool = False,
    timeout: int = 10,
) -> list[CheckResult]:
    """Run all health checks and return results."""
    results = [
        check_dashboard(url, timeout),
        check_upstream_api(api_url or env.get("API_BASE_URL") or "", timeout),
        check_credentials(env.get("CREDENTIALS_PATH", ".tasktracker_credentials.json")),
    ]
    if skip_storage:
        results.append(CheckResult("Object Storage", True, "Skipped (--skip-storage)", severity="info"))
    else:
        results.append(check_storage(env.get("STORAGE_URL") or "", timeout))
    return results


def main():
    parser = argparse.ArgumentParser(
        description="Task Tracker Dashboard Health Check",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--url", type=str, default="http://localhost:8000",
                        help="Dashboard base URL (default: http://localhost:8000)")
    parser.add_argument("--api-url", type=str, default=None,
                        help="Task Tracker API base URL (default: API_BASE_URL from .env)")
    parser.add_argument("--env-file", type=str, default=".env",
                        help="Settings file to read (default: .env)")
    parser.add_argument("--skip-storage", action="store_true",
                        help="Skip object storage check")
    parser.add_argument("--json", dest="output_json", action="store_true",
                        help="Output results as JSON")
    parser.add_argument("--timeout", type=int, default=10,
                        help="HTTP timeout in seconds (default: 10)")
    args = parser.parse_args()

    env = {k: v for k, v in dotenv_values(args.env_file).items() if v is not None}
    env.setdefault("API_BASE_URL", "https://task-tracker-backend-2jqf.onrender.com/api")
    now = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")

    results = run_healthcheck(
        url=args.url,
        env=env,
        api_url=args.api_url,
        skip_storage=args.skip_storage,
        timeout=args.timeout,
    )

    if args.output_json:
        output = {
            "timestamp": now,
            "target": args.url,
            "checks": [r.to_dict() for r in results],
            "all_passed": all(r.passed for r in results),
            "summary": {
                "total": len(results),
                "passed": sum(1 for r in results if r.passed),
                "failed": sum(1 for r in results if not r.passed),
                "warnings": sum(1 for r in results if r.severity == "warning"),
            },
        }
        print(json.dumps(output, indent=2))
    else:
        print(f"\n{'=' * 60}\n  TASK TRACKER DASHBOARD HEALTH CHECK\n  Target : {args.url}\n  Time   : {now}\n{'=' * 60}\n")
        for result in results:
            print(result)
            print()

        failed = sum(1 for r in results if not r.passed)
        print(f"{'=' * 60}")
        if failed == 0:
            print(f"  ALL {len(results)} CHECKS PASSED")
        else:
            print(f"  {failed}/{len(results)} CHECKS FAILED")
        print(f"{'=' * 60}")

    sys.exit(1 if any(not r.passed for r in results) else 0)


if __name__ == "__main__":
    main()
