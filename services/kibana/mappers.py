"""
Translation between declarative alert configuration and the Kibana alert wire model. Expansion builds an `Alert` from resource data for create and update; flattening writes a decoded `Alert` back into resource data for read.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

import logging
from collections.abc import Mapping
from typing import Any, Dict, Iterable, List, Optional

from pydantic import ValidationError

from config import config
from models.kibana.alerts import Alert, AlertAction, AlertSchedule
from models.kibana.resource import AlertConditions, AlertResourceConfig
from services.common.naming import to_camel_case, to_underscore
from services.common.set_utils import expand_list, flatten_float_list, flatten_string_list
from services.provider.resource_data import ResourceData
from .errors import DecodeError, MappingError
from .version_gate import VersionGate, VersionLike

logger = logging.getLogger(__name__)

CONDITION_WIRE_NAMES: Dict[str, str] = {
    "threshold_comparator": "thresholdComparator",
    "time_window_size": "timeWindowSize",
    "time_window_unit": "timeWindowUnit",
    "term_size": "termSize",
    "time_field": "timeField",
    "group_by": "groupBy",
    "aggregation_field": "aggField",
    "aggregation_type": "aggType",
    "term_field": "termField",
    "index": "index",
    "threshold": "threshold",
}
CONDITION_CONFIG_NAMES: Dict[str, str] = {wire: name for name, wire in CONDITION_WIRE_NAMES.items()}


def condition_wire_name(name: str) -> str:
    return CONDITION_WIRE_NAMES.get(name) or to_camel_case(name)


def condition_config_name(wire_name: str) -> str:
    return CONDITION_CONFIG_NAMES.get(wire_name) or to_underscore(wire_name)


def expand_actions(raw_actions: Optional[Iterable[Any]]) -> List[AlertAction]:
    actions: List[AlertAction] = []
    for entry in expand_list(raw_actions):
        if not isinstance(entry, Mapping):
            raise MappingError(entry)
        for key in ("id", "action_type_id"):
            if not isinstance(entry.get(key), str) or not entry.get(key):
                raise MappingError(entry.get(key), reason=f"Action field {key} must be a non-empty string")
        params = entry.get("params")
        if params is not None and not isinstance(params, Mapping):
            raise MappingError(params, reason="Action params must be a mapping")
        actions.append(
            AlertAction(
                id=entry["id"],
                group=entry.get("group") or config.ALERT_DEFAULT_ACTION_GROUP,
                action_type_id=entry["action_type_id"],
                params=dict(params or {}),
            )
        )
    return actions


def expand_conditions(raw: Mapping) -> Dict[str, Any]:
    conditions: Dict[str, Any] = {}
    for key, value in raw.items():
        if value is None:
            continue
        conditions[condition_wire_name(key)] = value

    conditions["index"] = flatten_string_list(raw.get("index"))
    conditions["threshold"] = expand_list(raw.get("threshold"))
    return conditions


def flatten_conditions(params: Mapping) -> List[Dict[str, Any]]:
    conditions: Dict[str, Any] = {}
    for key, value in params.items():
        if value is None:
            continue
        conditions[condition_config_name(key)] = value

    conditions["index"] = flatten_string_list(params.get("index"))
    try:
        conditions["threshold"] = flatten_float_list(params.get("threshold"))
    except (TypeError, ValueError) as exc:
        raise DecodeError(f"error reading alert threshold {params.get('threshold')!r}: {exc}") from exc
    return [conditions]


def flatten_actions(actions: Iterable[AlertAction]) -> List[Dict[str, Any]]:
    return [
        {
            "id": action.id,
            "group": action.group,
            "action_type_id": action.action_type_id,
            "params": dict(action.params),
        }
        for action in actions
    ]


def load_resource_config(resource: ResourceData) -> AlertResourceConfig:
    values = resource.to_dict()
    try:
        return AlertResourceConfig.model_validate(values)
    except ValidationError as exc:
        raise MappingError(values, reason=f"Invalid alert configuration ({exc.error_count()} errors): {exc}") from exc


def expand_alert(resource: ResourceData, server_version: VersionLike, gate: VersionGate) -> Alert:
    actions = expand_actions(resource.get("actions"))
    settings = load_resource_config(resource)

    if len(settings.schedule) != 1:
        raise MappingError(resource.get("schedule"), reason="schedule must contain exactly one entry")

    conditions: AlertConditions = settings.conditions[0]
    notify_when = settings.notify_when if gate.supports_notify_when(server_version) else None
    alert = Alert(
        id=resource.id or None,
        name=settings.name,
        tags=settings.tags,
        alert_type_id=settings.alert_type_id,
        schedule=AlertSchedule(interval=settings.schedule[0].interval),
        throttle=settings.throttle,
        notify_when=notify_when,
        enabled=settings.enabled,
        consumer=settings.consumer,
        params=expand_conditions(conditions.model_dump(exclude_none=True)),
        actions=actions,
    )

    logger.debug("Expanded Kibana alert %s: %s", alert.name, alert.params)
    return alert


def flatten_alert(alert: Alert, resource: ResourceData) -> None:
    resource.set("name", alert.name)
    resource.set("tags", list(alert.tags))
    resource.set("alert_type_id", alert.alert_type_id)
    resource.set("schedule", [{"interval": alert.schedule.interval}])
    resource.set("throttle", alert.throttle)
    resource.set("notify_when", alert.notify_when)
    resource.set("enabled", alert.enabled)
    resource.set("consumer", alert.consumer)
    resource.set("conditions", flatten_conditions(alert.params))
    resource.set("actions", flatten_actions(alert.actions))
