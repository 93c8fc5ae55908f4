"""Smoke test for a running mcp-clawdaddy HTTP bridge (CLAWDADDY_TRANSPORT=http).

Usage: python scripts/clawdaddy_smoke.py [domain]
"""
from __future__ import annotations

import json
import os
import sys
import urllib.error
import urllib.request
from typing import Any, Dict, Optional

BRIDGE_URL = os.getenv("CLAWDADDY_MCP_URL", "http://localhost:8020").rstrip("/")
SMOKE_DOMAIN = os.getenv("CLAWDADDY_TEST_DOMAIN", "coolstartup.com")
UNAUTHENTICATED_TOOLS = ("lookup_domain", "get_quote")


def _call(path: str, payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    request = urllib.request.Request(f"{BRIDGE_URL}{path}")
    if payload is not None:
        request.data = json.dumps(payload).encode("utf-8")
        request.add_header("Content-Type", "application/json")
    with urllib.request.urlopen(request, timeout=30) as response:
        return json.load(response)


def _check_bridge(domain: str) -> bool:
    health = _call("/health")
    print(f"health: {health.get('status')}")
    manifest = _call("/.well-known/mcp.json")
    names = [tool["name"] for tool in manifest["capabilities"]["tools"]]
    print(f"manifest: {len(names)} tools")
    missing = [name for name in UNAUTHENTICATED_TOOLS if name not in names]
    if missing:
        print(f"manifest is missing: {', '.join(missing)}")
        return False

    ok = True
    for name in UNAUTHENTICATED_TOOLS:
        result = _call("/invoke", {"tool": name, "arguments": {"domain": domain}})
        ok = ok and not result["is_error"]
        print(f"--- {name} ({'error' if result['is_error'] else 'ok'})\n{result['text']}")
    return ok


def main(argv: list[str]) -> int:
    domain = argv[0] if argv else SMOKE_DOMAIN
    print(f"bridge: {BRIDGE_URL} domain: {domain}")
    try:
        return 0 if _check_bridge(domain) else 1
    except urllib.error.HTTPError as exc:
        print(f"HTTP {exc.code} from {exc.url}: {exc.read().decode('utf-8', errors='replace')}")
    except urllib.error.URLError as exc:
        print(f"bridge unreachable: {exc.reason}")
    return 1


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
