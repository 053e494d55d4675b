#!/usr/bin/env python3
"""
expts/demo.py

End-to-end demo of the token URI service (Linux / macOS / Windows):

  - starts the FastAPI app under uvicorn in a child process
  - waits for /health
  - walks one token through default -> base path -> explicit override -> cleared
  - configures a small batch and resolves every token in it
  - sets the contract-level metadata URI
  - stops the server unless KEEP_SERVER=1

Usage:
  python expts/demo.py

Environment:
  KEEP_SERVER=1     -> leave the server running after the demo
  DEMO_PORT=8090    -> port to bind (default 8090)
"""

from __future__ import annotations

import json
import os
import subprocess
import sys
import time
from pathlib import Path
from typing import Optional
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

ADMIN_TOKEN = "demo-admin-token"
DEFAULT_BASE_URI = "https://api.example.com/meta/"


# -----------------------------------------------------------------------------
# Colours (no emojis) – fall back to plain text on non-TTY
# -----------------------------------------------------------------------------
def _colour_codes():
    names = ["BOLD", "DIM", "GREEN", "YELLOW", "RED", "RESET"]
    if not sys.stdout.isatty():
        return {k: "" for k in names}
    return dict(zip(names, ["\033[1m", "\033[2m", "\033[32m", "\033[33m", "\033[31m", "\033[0m"]))


C = _colour_codes()


def log_kv(label: str, *values: str) -> None:
    print(f"  {C['DIM']}{label}:{C['RESET']} {' '.join(str(v) for v in values)}")


def log_section(*msg: str) -> None:
    title = " ".join(str(m) for m in msg)
    print()
    print("###############################################################################")
    print(f"# {title}")
    print("###############################################################################")
    print()


def warn(msg: str) -> None:
    print(f"{C['YELLOW']}WARN{C['RESET']}: {msg}")


def err(msg: str) -> None:
    print(f"{C['RED']}ERROR{C['RESET']}: {msg}", file=sys.stderr)


# -----------------------------------------------------------------------------
# HTTP helpers
# -----------------------------------------------------------------------------
def wait_for_http(url: str, max_tries: int = 30, delay: float = 0.5) -> None:
    print(f"Waiting for {url} ...")
    for _ in range(max_tries):
        try:
            with urlopen(Request(url, method="GET"), timeout=5) as resp:
                if 200 <= resp.status < 300:
                    print(f"  {C['GREEN']}OK{C['RESET']} ({url})")
                    return
        except (URLError, HTTPError):
            pass
        time.sleep(delay)

    err(f"timeout waiting for {url}")
    raise SystemExit(1)


def http_json(method: str, url: str, payload: Optional[dict] = None, admin: bool = False) -> Optional[dict]:
    data = json.dumps(payload).encode("utf-8") if payload is not None else None
    req = Request(url, data=data, method=method)
    req.add_header("Content-Type", "application/json")
    if admin:
        req.add_header("X-Admin-Token", ADMIN_TOKEN)

    try:
        with urlopen(req, timeout=10) as resp:
            return json.loads(resp.read().decode("utf-8"))
    except HTTPError as e:
        # Keep going so the rest of the demo still runs.
        warn(f"{method} {url} returned HTTP {e.code}: {e.read().decode('utf-8', errors='replace')}")
        return None


def show_uri(base: str, token_id: int) -> None:
    body = http_json("GET", f"{base}/tokens/{token_id}/uri")
    if body is not None:
        log_kv(f"resolve({token_id})", body["uri"])


# -----------------------------------------------------------------------------
# Main flow
# -----------------------------------------------------------------------------
def main() -> None:
    root_dir = Path(__file__).resolve().parent.parent
    port = int(os.environ.get("DEMO_PORT", "8090"))
    base = f"http://127.0.0.1:{port}"
    keep_server = os.environ.get("KEEP_SERVER", "0") == "1"

    env = dict(os.environ)
    env.update(
        TOKEN_URI_DEFAULT_BASE_URI=DEFAULT_BASE_URI,
        TOKEN_URI_ADMIN_TOKEN=ADMIN_TOKEN,
        PYTHONPATH=str(root_dir / "uri_service"),
    )

    log_section("Starting token URI service")
    cmd = [sys.executable, "-m", "uvicorn", "token_uri.main:app", "--host", "127.0.0.1", "--port", str(port)]
    log_kv("command", *cmd)
    server = subprocess.Popen(cmd, env=env)

    try:
        wait_for_http(f"{base}/health")

        log_section("Token 7: default -> base path -> explicit override -> cleared")
        show_uri(base, 7)

        http_json("PUT", f"{base}/tokens/7/base-path", {"base_uri": "https://cdn.example.com/v2", "use_id_in_path": True}, admin=True)
        show_uri(base, 7)

        http_json("PUT", f"{base}/tokens/7/explicit-uri", {"uri": "ipfs://QmXYZ"}, admin=True)
        show_uri(base, 7)

        http_json("DELETE", f"{base}/tokens/7/explicit-uri", admin=True)
        show_uri(base, 7)

        log_section("Rejected writes")
        http_json("PUT", f"{base}/tokens/8/base-path", {"base_uri": "", "use_id_in_path": True}, admin=True)
        http_json("PUT", f"{base}/tokens/8/explicit-uri", {"uri": "ipfs://nope"})
        show_uri(base, 8)

        log_section("Batch base-path configuration")
        ids = list(range(100, 105))
        http_json(
            "POST",
            f"{base}/tokens/base-path/batch",
            {
                "token_ids": ids,
                "base_uris": ["ipfs://QmBatch/"] * len(ids),
                "use_id_in_path": [i % 2 == 0 for i in ids],
            },
            admin=True,
        )
        for token_id in ids:
            show_uri(base, token_id)

        log_section("Contract-level metadata")
        http_json("PUT", f"{base}/contract-metadata", {"uri": "ipfs://QmCollection/contract.json"}, admin=True)
        body = http_json("GET", f"{base}/contract-metadata")
        if body is not None:
            log_kv("contract metadata", body["uri"])

        log_section("Demo complete")
        print(f"  - resolve a token:   {base}/tokens/<id>/uri")
        print(f"  - metadata schema:   {base}/metadata-schema")
        print(f"  - OpenAPI docs:      {base}/docs")
        print()
        print("To keep the server running after the script, use:")
        print("  KEEP_SERVER=1 python expts/demo.py")

        if keep_server:
            log_section("KEEP_SERVER=1 so the service is left running (Ctrl+C to stop)")
            server.wait()
    finally:
        if server.poll() is None:
            server.terminate()
            try:
                server.wait(timeout=10)
            except subprocess.TimeoutExpired:
                server.kill()


if __name__ == "__main__":
    main()
