"""
Pydantic models for the Kibana alerting API wire format. Field names follow the Python convention and map to Kibana's camelCase through aliases.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from config import config

DESC_ALERT_ID = "Server-assigned alert identifier"
DESC_ALERT_NAME = "Alert name"
DESC_ALERT_TAGS = "Tags attached to the alert"
DESC_ALERT_TYPE_ID = "Alert type executed on each scheduled run"
DESC_ALERT_SCHEDULE = "Evaluation schedule"
DESC_ALERT_THROTTLE = "Minimum time between repeated notifications"
DESC_ALERT_NOTIFY_WHEN = "Notification throttling policy (Kibana >= 7.11)"
DESC_ALERT_ENABLED = "Whether the alert runs on its schedule"
DESC_ALERT_CONSUMER = "Kibana feature owning the alert"
DESC_ALERT_PARAMS = "Alert type parameters (conditions)"
DESC_ALERT_ACTIONS = "Actions run when the alert fires"


class NotifyWhen(str, Enum):
    ON_ACTION_GROUP_CHANGE = "onActionGroupChange"
    ON_ACTIVE_ALERT = "onActiveAlert"
    ON_THROTTLE_INTERVAL = "onThrottleInterval"


class AlertSchedule(BaseModel):
    interval: str = Field(..., description="Evaluation interval, e.g. 1m")


class AlertAction(BaseModel):
    id: str = Field(..., description="Connector identifier")
    group: str = Field(config.ALERT_DEFAULT_ACTION_GROUP, description="Action group the action runs for")
    action_type_id: Optional[str] = Field(None, alias="actionTypeId", description="Connector type, e.g. .slack")
    params: Dict[str, Any] = Field(default_factory=dict, description="Connector parameters")
    model_config = ConfigDict(populate_by_name=True)


class Alert(BaseModel):
    id: Optional[str] = Field(None, description=DESC_ALERT_ID)
    name: str = Field(..., description=DESC_ALERT_NAME)
    tags: List[str] = Field(default_factory=list, description=DESC_ALERT_TAGS)
    alert_type_id: str = Field(config.ALERT_DEFAULT_TYPE_ID, alias="alertTypeId", description=DESC_ALERT_TYPE_ID)
    schedule: AlertSchedule = Field(..., description=DESC_ALERT_SCHEDULE)
    throttle: Optional[str] = Field(None, description=DESC_ALERT_THROTTLE)
    notify_when: Optional[NotifyWhen] = Field(None, alias="notifyWhen", description=DESC_ALERT_NOTIFY_WHEN)
    enabled: bool = Field(True, description=DESC_ALERT_ENABLED)
    consumer: str = Field(config.ALERT_DEFAULT_CONSUMER, description=DESC_ALERT_CONSUMER)
    params: Dict[str, Any] = Field(default_factory=dict, description=DESC_ALERT_PARAMS)
    actions: List[AlertAction] = Field(default_factory=list, description=DESC_ALERT_ACTIONS)
    model_config = ConfigDict(use_enum_values=True, populate_by_name=True)
