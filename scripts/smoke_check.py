#!/usr/bin/env python3
"""
Smoke check for a deployed greeting service.
Waits for the service to answer, then validates the status payload.
"""

import argparse
import os
import sys

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from greeting_service.probe import ProbeError, check_payload, wait_until_ready


def parse_args(argv=None):
    default_url = f"http://127.0.0.1:{os.environ.get('PORT') or 3000}/"
    p = argparse.ArgumentParser(description=__doc__)
    p.add_argument('url', nargs='?', default=default_url)
    p.add_argument('--expect-db-url', default=None, help='exact db_url value the service must report')
    p.add_argument('--attempts', type=int, default=60)
    p.add_argument('--interval', type=float, default=1.0)
    return p.parse_args(argv)


def smoke_check(argv=None) -> int:
    args = parse_args(argv)
    print("=" * 60)
    print("Greeting Service Smoke Check")
    print("=" * 60)
    print(f"\nTarget: {args.url}")

    try:
        payload = wait_until_ready(args.url, attempts=args.attempts, interval=args.interval)
    except ProbeError as e:
        print(f"\n❌ {e}")
        return 1

    if isinstance(payload, dict):
        print(f"  - time: {payload.get('time')}")
        print(f"  - version: {payload.get('version')}")
        print(f"  - db_url_env_present: {payload.get('db_url_env_present')}")

    problems = check_payload(payload, expect_db_url=args.expect_db_url)
    if problems:
        print("\n❌ Payload problems:")
        for msg in problems:
            print(f"  - {msg}")
        return 1

    print("\n✅ Service healthy")
    return 0


if __name__ == '__main__':
    sys.exit(smoke_check())
