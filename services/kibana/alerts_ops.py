"""
Alert operations against the Kibana alerting REST API, including fetching, creating, updating, enabling or disabling, and deleting alerts. Each function issues a single request through the transport and converts payloads to and from the `Alert` model.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

import json
import logging
from typing import Any, Dict, Optional

import httpx

from models.kibana.alerts import Alert
from services.common.url_utils import expand_path, space_prefixed
from .errors import DecodeError, EncodeError, NotFoundError

logger = logging.getLogger(__name__)

ALERTS_PATH = "/api/alerts/alert"
ALERT_PATH = "/api/alerts/alert/{id}"
ALERT_ENABLE_PATH = "/api/alerts/alert/{id}/_enable"
ALERT_DISABLE_PATH = "/api/alerts/alert/{id}/_disable"

# Kibana rejects alertTypeId, consumer and enabled in an update body
UPDATE_FIELDS = frozenset({"name", "tags", "schedule", "throttle", "notify_when", "params", "actions"})


def _encode(payload: Dict[str, Any]) -> bytes:
    try:
        return json.dumps(payload).encode("utf-8")
    except (TypeError, ValueError) as exc:
        raise EncodeError(f"error marshalling alert body: {exc}") from exc


def encode_alert(alert: Alert, update: bool = False) -> bytes:
    try:
        payload = alert.model_dump(
            mode="json",
            by_alias=True,
            exclude_none=True,
            include=set(UPDATE_FIELDS) if update else None,
            exclude={"id"},
        )
    except ValueError as exc:
        raise EncodeError(f"error marshalling alert {alert.name}: {exc}") from exc
    return _encode(payload)


def decode_alert(raw: bytes) -> Alert:
    try:
        return Alert.model_validate(json.loads(raw))
    except ValueError as exc:
        raise DecodeError(f"error unmarshalling alert body: {exc}", raw) from exc


def _is_not_found(exc: httpx.HTTPStatusError) -> bool:
    return exc.response is not None and exc.response.status_code == 404


async def get_alert(transport, alert_id: str, space_id: str = "", timeout: Optional[float] = None) -> Alert:
    path = space_prefixed(expand_path(ALERT_PATH, id=alert_id), space_id)
    try:
        raw = await transport.perform_request("GET", path, timeout=timeout)
    except httpx.HTTPStatusError as exc:
        if _is_not_found(exc):
            raise NotFoundError(alert_id) from exc
        raise
    return decode_alert(raw)


async def create_alert(transport, alert: Alert, space_id: str = "", timeout: Optional[float] = None) -> str:
    path = space_prefixed(ALERTS_PATH, space_id)
    body = encode_alert(alert)
    try:
        raw = await transport.perform_request("POST", path, body=body, timeout=timeout)
    except httpx.HTTPError:
        logger.info("Kibana alert create failed: %s %s", path, body)
        raise

    created = decode_alert(raw)
    if not created.id:
        raise DecodeError("Kibana returned no id for the created alert", raw)
    return created.id


async def update_alert(transport, alert: Alert, space_id: str = "", timeout: Optional[float] = None) -> Alert:
    if not alert.id:
        raise EncodeError(f"cannot update alert {alert.name} without an id")
    path = space_prefixed(expand_path(ALERT_PATH, id=alert.id), space_id)
    body = encode_alert(alert, update=True)
    try:
        raw = await transport.perform_request("PUT", path, body=body, timeout=timeout)
    except httpx.HTTPStatusError as exc:
        if _is_not_found(exc):
            raise NotFoundError(alert.id) from exc
        raise
    return decode_alert(raw)


async def set_alert_enabled(
    transport,
    alert_id: str,
    enabled: bool,
    space_id: str = "",
    timeout: Optional[float] = None,
) -> None:
    template = ALERT_ENABLE_PATH if enabled else ALERT_DISABLE_PATH
    path = space_prefixed(expand_path(template, id=alert_id), space_id)
    await transport.perform_request("POST", path, timeout=timeout)


async def delete_alert(transport, alert_id: str, space_id: str = "", timeout: Optional[float] = None) -> None:
    path = space_prefixed(expand_path(ALERT_PATH, id=alert_id), space_id)
    await transport.perform_request("DELETE", path, timeout=timeout)
