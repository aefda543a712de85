# Kibana alerting subpackage: wire ops, mappers, version gate and transport
"""Init module."""
from . import errors, version_gate, mappers, alerts_ops, transport

__all__ = ["errors", "version_gate", "mappers", "alerts_ops", "transport"]
