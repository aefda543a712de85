"""
Utilities for building Kibana API paths, including percent-encoding of path parameters and the optional space prefix used for tenancy partitions.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

import re
from typing import Optional
from urllib.parse import quote, urlparse

_ALLOWED_SCHEMES = frozenset({"http", "https"})
_MAX_URL_LENGTH = 2048
_PLACEHOLDER = re.compile(r"\{([a-zA-Z_][a-zA-Z0-9_]*)\}")


def is_valid_base_url(value: str | None) -> bool:
    if not value or not isinstance(value, str):
        return False

    if len(value) > _MAX_URL_LENGTH:
        return False

    try:
        parsed = urlparse(value.strip())
    except ValueError:
        return False

    if parsed.scheme not in _ALLOWED_SCHEMES:
        return False

    return bool(parsed.hostname)


def expand_path(template: str, **params: str) -> str:
    def _replace(match: re.Match) -> str:
        name = match.group(1)
        if name not in params:
            raise ValueError(f"Missing path parameter {name!r} for {template}")
        return quote(str(params[name]), safe="")

    return _PLACEHOLDER.sub(_replace, template)


def space_prefixed(path: str, space_id: Optional[str] = None) -> str:
    if not space_id:
        return path
    return f"/s/{quote(space_id, safe='')}{path}"
