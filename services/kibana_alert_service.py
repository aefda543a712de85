"""
Resource handler for Kibana alerts, invoked by the reconciliation engine to create, read, update and delete one declarative alert. Every operation first discovers the Kibana version and enforces the alerting API minimum before touching an alert endpoint, then translates between resource data and the Kibana alert model and records the resource identity only after a fully successful call.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

import logging
from typing import Optional

from packaging.version import Version

from config import config
from models.kibana.alerts import Alert
from models.kibana.resource import AlertResourceConfig
from services.kibana.alerts_ops import (
    get_alert,
    create_alert,
    update_alert,
    set_alert_enabled,
    delete_alert,
)
from services.kibana.errors import NotFoundError
from services.kibana.mappers import expand_alert, flatten_alert
from services.kibana.transport import KibanaTransport
from services.kibana.version_gate import VersionGate
from services.provider.resource_data import ResourceData

logger = logging.getLogger(__name__)


class KibanaAlertResource:
    schema = AlertResourceConfig

    def __init__(
        self,
        transport: Optional[KibanaTransport] = None,
        version_gate: Optional[VersionGate] = None,
        space_id: str = config.KIBANA_SPACE_ID,
    ) -> None:
        self.transport = transport or KibanaTransport()
        self.version_gate = version_gate or VersionGate.from_config()
        self.space_id = space_id
        self.logger = logger

    def new_resource_data(self, values=None, resource_id: Optional[str] = None) -> ResourceData:
        return ResourceData(self.schema, values=values, resource_id=resource_id)

    async def check_version(self, timeout: Optional[float] = None) -> Version:
        server_version = await self.transport.discover_server_version(timeout=timeout)
        self.version_gate.check_minimum(server_version)
        return server_version

    async def create(self, resource: ResourceData, timeout: Optional[float] = None) -> None:
        server_version = await self.check_version(timeout)

        alert = expand_alert(resource, server_version, self.version_gate)
        alert_id = await create_alert(self.transport, alert, space_id=self.space_id, timeout=timeout)

        self.logger.info("Kibana Alert (%s) created", alert_id)
        resource.set_id(alert_id)

    async def read(self, resource: ResourceData, timeout: Optional[float] = None) -> None:
        await self.check_version(timeout)

        alert_id = resource.id
        try:
            alert = await get_alert(self.transport, alert_id, space_id=self.space_id, timeout=timeout)
        except NotFoundError:
            self.logger.warning("Kibana Alert (%s) not found, removing from state", alert_id)
            resource.set_id("")
            return

        flatten_alert(alert, resource)

    async def update(self, resource: ResourceData, timeout: Optional[float] = None) -> None:
        server_version = await self.check_version(timeout)

        alert = expand_alert(resource, server_version, self.version_gate)
        updated: Alert = await update_alert(self.transport, alert, space_id=self.space_id, timeout=timeout)

        if updated.enabled != alert.enabled:
            await set_alert_enabled(
                self.transport, updated.id or resource.id, alert.enabled, space_id=self.space_id, timeout=timeout
            )
            updated.enabled = alert.enabled

        self.logger.info("Kibana Alert (%s) updated", resource.id)
        flatten_alert(updated, resource)

    async def delete(self, resource: ResourceData, timeout: Optional[float] = None) -> None:
        await self.check_version(timeout)

        await delete_alert(self.transport, resource.id, space_id=self.space_id, timeout=timeout)

        self.logger.info("Kibana Alert (%s) deleted", resource.id)
        resource.set_id("")

    async def import_state(self, alert_id: str, timeout: Optional[float] = None) -> ResourceData:
        resource = self.new_resource_data(resource_id=alert_id)
        await self.read(resource, timeout=timeout)
        return resource
