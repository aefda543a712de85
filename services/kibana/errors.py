"""
Exception hierarchy raised by the Kibana alert resource handler. Transport failures are not wrapped and surface as `httpx.HTTPError`; only a 404 from an alert endpoint is translated into `NotFoundError`.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from typing import Any, Optional


class KibanaAlertError(Exception):
    pass


class VersionError(KibanaAlertError):
    def __init__(self, server_version: Any, minimum: Any, feature: str = "Kibana Alert endpoint") -> None:
        self.server_version = str(server_version)
        self.minimum = str(minimum)
        super().__init__(f"{feature} only available from Kibana >= {self.minimum}, got version {self.server_version}")


class NotFoundError(KibanaAlertError):
    def __init__(self, alert_id: str) -> None:
        self.alert_id = alert_id
        super().__init__(f"Kibana alert {alert_id} not found")


class EncodeError(KibanaAlertError):
    pass


class DecodeError(KibanaAlertError):
    def __init__(self, message: str, raw: Optional[bytes] = None) -> None:
        self.raw = raw
        if raw is not None:
            message = f"{message}: {raw!r}"
        super().__init__(message)


class MappingError(KibanaAlertError):
    def __init__(self, value: Any, reason: str = "Error asserting data") -> None:
        self.value = value
        super().__init__(f"{reason}: {value!r}, {type(value).__name__}")
