"""
Configuration management for the Kibana alert resource handler, loading settings from environment variables with support for defaults, type conversion, and validation. This module defines a `Config` class that encapsulates the Kibana endpoint and credentials, HTTP client tuning, retry controls for the transport, the version thresholds that gate the alerting API, and the defaults applied to declarative alert configuration.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

import logging
import os
from typing import Optional
from services.common.url_utils import is_valid_base_url

logger = logging.getLogger(__name__)


def _to_bool(value: Optional[str], default: bool = False) -> bool:
    if value is None:
        return default
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def _to_optional(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    normalized = value.strip()
    return normalized or None


class Config:
    def __init__(self) -> None:
        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "info")

        # Kibana endpoint
        self.KIBANA_URL: str = os.getenv("KIBANA_URL", "http://kibana:5601")
        self.KIBANA_USERNAME: Optional[str] = _to_optional(os.getenv("KIBANA_USERNAME"))
        self.KIBANA_PASSWORD: Optional[str] = _to_optional(os.getenv("KIBANA_PASSWORD"))
        self.KIBANA_API_KEY: Optional[str] = _to_optional(os.getenv("KIBANA_API_KEY"))
        self.KIBANA_SPACE_ID: str = os.getenv("KIBANA_SPACE_ID", "").strip()
        self.KIBANA_INSECURE: bool = _to_bool(os.getenv("KIBANA_INSECURE"))

        # Timeouts and retries
        self.DEFAULT_TIMEOUT: float = float(os.getenv("DEFAULT_TIMEOUT", "30.0"))
        self.MAX_RETRIES: int = int(os.getenv("MAX_RETRIES", "3"))
        self.RETRY_BACKOFF: float = float(os.getenv("RETRY_BACKOFF", "1.0"))
        self.RETRY_MAX_BACKOFF: float = float(os.getenv("RETRY_MAX_BACKOFF", "8.0"))

        # HTTP client pooling
        self.HTTP_CLIENT_MAX_CONNECTIONS: int = int(os.getenv("HTTP_CLIENT_MAX_CONNECTIONS", "20"))
        self.HTTP_CLIENT_MAX_KEEPALIVE_CONNECTIONS: int = int(os.getenv("HTTP_CLIENT_MAX_KEEPALIVE_CONNECTIONS", "10"))
        self.HTTP_CLIENT_KEEPALIVE_EXPIRY: float = float(os.getenv("HTTP_CLIENT_KEEPALIVE_EXPIRY", "30"))

        # Alerting API version gates
        self.KIBANA_ALERT_MIN_VERSION: str = os.getenv("KIBANA_ALERT_MIN_VERSION", "7.7.0")
        self.KIBANA_NOTIFY_WHEN_MIN_VERSION: str = os.getenv("KIBANA_NOTIFY_WHEN_MIN_VERSION", "7.11.0")

        # Declarative defaults
        self.ALERT_DEFAULT_TYPE_ID: str = os.getenv("ALERT_DEFAULT_TYPE_ID", ".index-threshold")
        self.ALERT_DEFAULT_CONSUMER: str = os.getenv("ALERT_DEFAULT_CONSUMER", "alerts")
        self.ALERT_DEFAULT_ACTION_GROUP: str = os.getenv("ALERT_DEFAULT_ACTION_GROUP", "default")

        self.validate()

    def validate(self) -> None:
        if not is_valid_base_url(self.KIBANA_URL):
            raise ValueError("KIBANA_URL must be an http(s) URL with a host")
        if self.KIBANA_API_KEY and (self.KIBANA_USERNAME or self.KIBANA_PASSWORD):
            raise ValueError("KIBANA_API_KEY cannot be combined with KIBANA_USERNAME/KIBANA_PASSWORD")
        if bool(self.KIBANA_USERNAME) != bool(self.KIBANA_PASSWORD):
            raise ValueError("KIBANA_USERNAME and KIBANA_PASSWORD must be set together")
        if self.DEFAULT_TIMEOUT <= 0:
            raise ValueError("DEFAULT_TIMEOUT must be greater than 0")
        if self.MAX_RETRIES < 1:
            raise ValueError("MAX_RETRIES must be at least 1")
        if self.KIBANA_INSECURE:
            logger.warning("TLS verification disabled for Kibana at %s", self.KIBANA_URL)


config = Config()
