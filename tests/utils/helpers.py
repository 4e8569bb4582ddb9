"""
Test helper functions for common testing operations
"""

import base64
import json
from http.cookies import SimpleCookie
from typing import Any, Dict, List, Optional

import httpx


def set_cookie_headers(response: httpx.Response, name: str) -> List[str]:
    """Raw Set-Cookie lines on ``response`` that set cookie ``name``"""
    return [
        value for value in response.headers.get_list("set-cookie")
        if value.split("=", 1)[0].strip() == name
    ]


def parse_set_cookie(response: httpx.Response, name: str) -> Optional[SimpleCookie]:
    """Parse the last Set-Cookie line for ``name``, or None if there is none"""
    lines = set_cookie_headers(response, name)
    if not lines:
        return None
    cookie = SimpleCookie()
    cookie.load(lines[-1])
    return cookie


def assert_no_sensitive_data_in_logs(caplog, sensitive_patterns: List[str]):
    """Assert that sensitive data patterns don't appear in log messages or extras"""
    for record in caplog.records:
        rendered = record.getMessage() + " " + " ".join(str(v) for v in record.__dict__.values())
        for pattern in sensitive_patterns:
            assert pattern not in rendered, f"Sensitive pattern '{pattern}' found in logs"


def decode_flow_session(response: httpx.Response, name: str = "proconnect-flow") -> Dict[str, Any]:
    """Decode the signed flow session cookie set on ``response``

    The signature is not checked; this only reads back what was stored.
    """
    lines = set_cookie_headers(response, name)
    if not lines:
        return {}
    value = lines[-1].split(";", 1)[0].split("=", 1)[1]
    payload = value.split(".", 1)[0]
    return json.loads(base64.b64decode(payload))
