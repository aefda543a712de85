"""
In-memory resource state handed to resource handlers by the reconciliation engine: an identity cell plus a typed configuration accessor. Values that were never set fall back to the defaults declared on the resource schema model.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

import copy
from typing import Any, Dict, Optional, Type

from pydantic import BaseModel


class ResourceData:
    def __init__(
        self,
        schema: Type[BaseModel],
        values: Optional[Dict[str, Any]] = None,
        resource_id: Optional[str] = None,
        prior: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._schema = schema
        self._values: Dict[str, Any] = dict(values or {})
        self._prior: Optional[Dict[str, Any]] = dict(prior) if prior is not None else None
        self._id: str = resource_id or ""

    @property
    def id(self) -> str:
        return self._id

    def set_id(self, resource_id: Optional[str]) -> None:
        self._id = resource_id or ""

    def _default(self, key: str) -> Any:
        field = self._schema.model_fields.get(key)
        if field is None:
            raise KeyError(f"{key} is not a field of {self._schema.__name__}")
        if field.is_required():
            return None
        return field.get_default(call_default_factory=True)

    def get(self, key: str) -> Any:
        if key in self._values and self._values[key] is not None:
            return self._values[key]
        return self._default(key)

    def set(self, key: str, value: Any) -> None:
        if key not in self._schema.model_fields:
            raise KeyError(f"{key} is not a field of {self._schema.__name__}")
        self._values[key] = value

    def has_change(self, key: str) -> bool:
        if self._prior is None:
            return False
        before = self._prior.get(key, self._default(key))
        return before != self.get(key)

    def to_dict(self) -> Dict[str, Any]:
        return {key: self.get(key) for key in self._schema.model_fields}

    def snapshot(self) -> "ResourceData":
        """Copy whose prior state is this resource's current values, ready for an update diff."""
        current = copy.deepcopy(self.to_dict())
        return ResourceData(self._schema, values=current, resource_id=self._id, prior=current)
