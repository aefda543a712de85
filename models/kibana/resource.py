"""
Pydantic models describing the declarative configuration of a Kibana alert resource. These mirror the provider schema: underscore names, set-typed collections, schema defaults and cardinality limits. They are validated before any payload is built so malformed configuration never reaches Kibana.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from config import config
from services.common.set_utils import expand_list, expand_string_list

from .alerts import NotifyWhen


class AlertConditions(BaseModel):
    threshold_comparator: str = Field(..., description="Comparator applied to the threshold, e.g. >")
    time_window_size: int = Field(..., description="Size of the evaluated time window")
    time_window_unit: str = Field(..., description="Unit of the time window: s, m, h or d")
    term_size: Optional[int] = Field(None, description="Number of groups to evaluate when grouping by term")
    time_field: str = Field(..., description="Timestamp field used for the time window")
    group_by: Optional[str] = Field(None, description="all or top")
    aggregation_field: Optional[str] = Field(None, description="Field aggregated by aggregation_type")
    aggregation_type: Optional[str] = Field(None, description="count, avg, min, max or sum")
    term_field: Optional[str] = Field(None, description="Field grouped on when group_by is top")
    index: List[str] = Field(..., min_length=1, description="Indices queried by the alert")
    threshold: List[Union[int, float]] = Field(..., min_length=1, description="Threshold values")
    model_config = ConfigDict(extra="allow")

    @field_validator("index", mode="before")
    @classmethod
    def _expand_index(cls, value: Any) -> Any:
        if isinstance(value, (set, frozenset)):
            return expand_string_list(value)
        return value

    @field_validator("threshold", mode="before")
    @classmethod
    def _expand_threshold(cls, value: Any) -> Any:
        if isinstance(value, (set, frozenset)):
            return expand_list(value)
        return value


class ScheduleConfig(BaseModel):
    interval: str = Field(..., min_length=1)


class ActionConfig(BaseModel):
    id: str = Field(..., min_length=1)
    action_type_id: str = Field(..., min_length=1)
    group: str = Field(config.ALERT_DEFAULT_ACTION_GROUP)
    params: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("group", mode="before")
    @classmethod
    def _default_group(cls, value: Any) -> Any:
        return value or config.ALERT_DEFAULT_ACTION_GROUP

    @field_validator("params", mode="before")
    @classmethod
    def _default_params(cls, value: Any) -> Any:
        return {} if value is None else value


class AlertResourceConfig(BaseModel):
    name: str = Field(..., min_length=1)
    tags: List[str] = Field(default_factory=list)
    alert_type_id: str = Field(config.ALERT_DEFAULT_TYPE_ID)
    schedule: List[ScheduleConfig] = Field(default_factory=list, max_length=1)
    throttle: Optional[str] = None
    notify_when: Optional[NotifyWhen] = None
    enabled: bool = True
    consumer: str = Field(config.ALERT_DEFAULT_CONSUMER)
    conditions: List[AlertConditions] = Field(..., min_length=1, max_length=1)
    actions: List[ActionConfig] = Field(default_factory=list)
    model_config = ConfigDict(use_enum_values=True)

    @field_validator("tags", mode="before")
    @classmethod
    def _expand_tags(cls, value: Any) -> Any:
        return expand_string_list(value)

    @field_validator("conditions", "actions", mode="before")
    @classmethod
    def _expand_sets(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, dict):
            return [value]
        return list(value) if isinstance(value, (set, frozenset, tuple)) else value

    @field_validator("throttle", "notify_when", mode="before")
    @classmethod
    def _empty_as_none(cls, value: Any) -> Any:
        return value or None
