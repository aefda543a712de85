"""
Shared HTTP client construction for talking to Kibana, applying the configured connection pool limits, TLS verification, credentials and the headers Kibana requires on every API call.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from typing import Dict, Optional

import httpx
from config import config

KIBANA_HEADERS: Dict[str, str] = {
    "kbn-xsrf": "true",
    "Content-Type": "application/json",
    "Accept": "application/json",
}


def build_auth_headers(
    username: Optional[str] = None,
    password: Optional[str] = None,
    api_key: Optional[str] = None,
) -> tuple[Optional[httpx.BasicAuth], Dict[str, str]]:
    if api_key:
        return None, {"Authorization": f"ApiKey {api_key}"}
    if username and password:
        return httpx.BasicAuth(username, password), {}
    return None, {}


def create_async_client(
    timeout_seconds: float,
    base_url: str = "",
    username: Optional[str] = None,
    password: Optional[str] = None,
    api_key: Optional[str] = None,
    verify: bool = True,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    auth, auth_headers = build_auth_headers(username, password, api_key)
    return httpx.AsyncClient(
        base_url=base_url.rstrip("/"),
        auth=auth,
        headers={**KIBANA_HEADERS, **auth_headers},
        verify=verify,
        transport=transport,
        timeout=httpx.Timeout(timeout_seconds),
        limits=httpx.Limits(
            max_connections=config.HTTP_CLIENT_MAX_CONNECTIONS,
            max_keepalive_connections=config.HTTP_CLIENT_MAX_KEEPALIVE_CONNECTIONS,
            keepalive_expiry=config.HTTP_CLIENT_KEEPALIVE_EXPIRY,
        ),
    )
