"""Post-deploy smoke probe for a running greeting service.

Polls the service until it answers, then sanity-checks the JSON it returns.
Used by scripts/smoke_check.py and by deployment pipelines after a rollout.
"""
import time
from datetime import datetime
from typing import Any, Dict, List, Optional

import requests

from .config import VERSION

REQUIRED_FIELDS = ('message', 'db_url_env_present', 'db_url', 'time', 'version')


class ProbeError(RuntimeError):
    pass


def wait_until_ready(base_url: str, attempts: int = 60, interval: float = 1.0, timeout: float = 1.5) -> Dict[str, Any]:
    last_error: Optional[str] = None
    for _ in range(attempts):
        try:
            r = requests.get(base_url, timeout=timeout)
            if r.status_code == 200:
                print(f"[probe] {base_url} ready")
                return r.json()
            last_error = f"status {r.status_code}"
        except (requests.RequestException, ValueError) as e:
            last_error = str(e)
        time.sleep(interval)
    raise ProbeError(f"{base_url} not ready after {attempts} attempts ({last_error})")


def _parses_as_time(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    try:
        # fromisoformat only accepts a trailing Z from 3.11 on
        datetime.fromisoformat(value.replace('Z', '+00:00'))
    except ValueError:
        return False
    return True


def check_payload(payload: Any, expect_db_url: Optional[str] = None) -> List[str]:
    """Return a list of problems with a status payload; empty means healthy."""
    if not isinstance(payload, dict):
        return ["payload is not a JSON object"]
    problems = [f"missing field '{k}'" for k in REQUIRED_FIELDS if k not in payload]
    if 'message' in payload and not payload['message']:
        problems.append("empty message")
    if 'db_url_env_present' in payload and not isinstance(payload['db_url_env_present'], bool):
        problems.append("db_url_env_present is not a boolean")
    if 'time' in payload and not _parses_as_time(payload['time']):
        problems.append(f"time {payload['time']!r} is not an ISO date-time")
    if 'version' in payload and payload['version'] != VERSION:
        problems.append(f"version {payload['version']!r} != {VERSION!r}")
    db_url = payload.get('db_url')
    if isinstance(db_url, str) and 'password' in db_url:
        problems.append("db_url leaks a password")
    if expect_db_url is not None and db_url != expect_db_url:
        problems.append(f"db_url {db_url!r} != expected {expect_db_url!r}")
    return problems
