"""
Send a signed sample job event to a running service.

Usage:
    python scripts/send_test_webhook.py --url http://localhost:8000/webhook/teamtailor
    python scripts/send_test_webhook.py --event job.update --status draft --job-id 42

The signature is computed with TEAMTAILOR_WEBHOOK_SECRET (or --secret).
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

import httpx

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from common.utils.config import get_settings  # noqa: E402
from common.utils.env import load_env  # noqa: E402
from ingestion_service.signature import build_signature  # noqa: E402


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Post a signed sample webhook")
    parser.add_argument("--url", default="http://localhost:8000/webhook/teamtailor")
    parser.add_argument("--event", default="job.created", help="job.created / job.update / job.deleted")
    parser.add_argument("--status", default="open", help="open / closed / draft")
    parser.add_argument("--job-id", default="sample-1")
    parser.add_argument("--title", default="Warehouse Worker")
    parser.add_argument("--secret", default=None, help="defaults to TEAMTAILOR_WEBHOOK_SECRET")
    parser.add_argument("--header", default=None, help="signature header name, defaults to the first accepted one")
    return parser.parse_args()


def build_payload(args: argparse.Namespace) -> dict:
    return {
        "event_name": args.event,
        "id": args.job_id,
        "title": args.title,
        "body": "Join our logistics team in Tampere.",
        "pitch": "Steady shifts, friendly team and a workplace close to home.",
        "status": args.status,
        "company_name": "Wippii Work",
        "locations": ["Tampere"],
        "employment_type": "full-time",
        "remote_status": "none",
        "min_salary": 2600,
        "max_salary": 3100,
        "currency": "EUR",
    }


def main() -> int:
    args = parse_args()
    load_env()
    settings = get_settings()
    secret = args.secret or settings.teamtailor_webhook_secret
    if not secret:
        print("No secret: set TEAMTAILOR_WEBHOOK_SECRET or pass --secret")
        return 2

    body = json.dumps(build_payload(args)).encode("utf-8")
    header = args.header or settings.signature_header_names[0]
    headers = {"Content-Type": "application/json", header: build_signature(body, secret)}
    try:
        response = httpx.post(args.url, content=body, headers=headers, timeout=10)
    except httpx.HTTPError as exc:
        print(f"Request failed: {exc}")
        return 1
    print(f"{response.status_code} {response.text}")
    return 0 if response.is_success else 1


if __name__ == "__main__":
    sys.exit(main())
