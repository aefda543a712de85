"""
Transport for the Kibana REST API, performing raw requests with retry logic for transient failures and discovering the server version from the status endpoint. Retry, pooling and authentication live here so the alert handler above only deals with payloads and preconditions.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

import json
import logging
from typing import Optional

import httpx
from packaging.version import Version
from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential

from config import config
from services.common.http_client import create_async_client
from .errors import DecodeError
from .version_gate import parse_version

logger = logging.getLogger(__name__)

STATUS_PATH = "/api/status"

_DEFAULT_RETRY_ON_STATUS: frozenset[int] = frozenset({429, 500, 502, 503, 504})


def is_transient_http_exception(exc: BaseException, retry_on_status: frozenset[int] = _DEFAULT_RETRY_ON_STATUS) -> bool:
    if isinstance(exc, httpx.TimeoutException):
        return False
    if isinstance(exc, httpx.RequestError):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code if exc.response is not None else 0
        return status in retry_on_status
    return False


class KibanaTransport:
    def __init__(
        self,
        base_url: str = config.KIBANA_URL,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = config.DEFAULT_TIMEOUT,
        max_retries: int = config.MAX_RETRIES,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries
        self._client = client or create_async_client(
            timeout,
            base_url=self.base_url,
            username=config.KIBANA_USERNAME,
            password=config.KIBANA_PASSWORD,
            api_key=config.KIBANA_API_KEY,
            verify=not config.KIBANA_INSECURE,
        )

    async def __aenter__(self) -> "KibanaTransport":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def perform_request(
        self,
        method: str,
        path: str,
        body: Optional[bytes] = None,
        timeout: Optional[float] = None,
    ) -> bytes:
        @retry(
            retry=retry_if_exception(is_transient_http_exception),
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(multiplier=config.RETRY_BACKOFF, max=config.RETRY_MAX_BACKOFF),
            reraise=True,
        )
        async def _attempt() -> bytes:
            try:
                response = await self._client.request(
                    method,
                    path,
                    content=body,
                    timeout=timeout if timeout is not None else self.timeout,
                )
                response.raise_for_status()
                return response.content
            except httpx.HTTPError as exc:
                if is_transient_http_exception(exc):
                    logger.warning("Kibana %s %s failed, retrying: %s", method, path, exc)
                raise

        logger.debug("Kibana request %s %s", method, path)
        return await _attempt()

    async def discover_server_version(self, timeout: Optional[float] = None) -> Version:
        raw = await self.perform_request("GET", STATUS_PATH, timeout=timeout)
        try:
            number = json.loads(raw)["version"]["number"]
            return parse_version(number)
        except (ValueError, KeyError, TypeError) as exc:
            raise DecodeError(f"error reading Kibana version from {STATUS_PATH}: {exc}", raw) from exc
