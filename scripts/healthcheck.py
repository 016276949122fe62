#!/usr/bin/env python
"""Container healthcheck: exit 0 only when /healthz reports the database as ok."""

import os
import sys

import requests


def main() -> int:
    host = os.getenv("HEALTHCHECK_HOST", "127.0.0.1")
    port = os.getenv("PORT", "5000")
    target = f"http://{host}:{port}/healthz"
    try:
        resp = requests.get(target, timeout=5)
    except requests.exceptions.RequestException:
        return 1
    if resp.status_code != 200:
        return 1
    return 0 if resp.json().get("checks", {}).get("database") == "ok" else 1


if __name__ == "__main__":
    sys.exit(main())
