"""
Server version preconditions for the Kibana alerting API. The alerting endpoints require a minimum Kibana version on every operation, and the `notify_when` field is only honored from a later version; below that it is dropped from payloads instead of raising.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

import logging
from dataclasses import dataclass
from typing import Optional, Union

from packaging.version import InvalidVersion, Version

from config import config
from .errors import VersionError

logger = logging.getLogger(__name__)

VersionLike = Union[str, Version]


def parse_version(value: VersionLike) -> Version:
    if isinstance(value, Version):
        return value
    # build qualifiers such as 7.10.2-SNAPSHOT are not PEP 440
    normalized = str(value).strip().split("-", 1)[0]
    try:
        return Version(normalized)
    except InvalidVersion as exc:
        raise ValueError(f"Invalid Kibana version: {value!r}") from exc


@dataclass(frozen=True)
class VersionGate:
    minimum: Version
    notify_when_minimum: Version

    @classmethod
    def from_strings(cls, minimum: VersionLike, notify_when_minimum: VersionLike) -> "VersionGate":
        return cls(minimum=parse_version(minimum), notify_when_minimum=parse_version(notify_when_minimum))

    @classmethod
    def from_config(cls) -> "VersionGate":
        return cls.from_strings(config.KIBANA_ALERT_MIN_VERSION, config.KIBANA_NOTIFY_WHEN_MIN_VERSION)

    def check_minimum(self, server_version: VersionLike, minimum: Optional[VersionLike] = None) -> None:
        required = parse_version(minimum) if minimum is not None else self.minimum
        current = parse_version(server_version)
        if current < required:
            raise VersionError(current, required)

    def supports_notify_when(self, server_version: VersionLike) -> bool:
        supported = parse_version(server_version) >= self.notify_when_minimum
        if not supported:
            logger.debug("notify_when omitted: Kibana %s < %s", server_version, self.notify_when_minimum)
        return supported
