"""
Identifier case conversion between the underscore names used by declarative configuration and the camelCase names used on the Kibana wire.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

import re

_UPPER_BOUNDARY = re.compile(r"(?<=[a-z0-9])([A-Z])|(?<=[A-Z])([A-Z])(?=[a-z])")


def to_camel_case(value: str, upper_first: bool = False) -> str:
    parts = [part for part in value.split("_") if part]
    if not parts:
        return value
    head = parts[0]
    head = head[:1].upper() + head[1:] if upper_first else head[:1].lower() + head[1:]
    return head + "".join(part[:1].upper() + part[1:] for part in parts[1:])


def to_underscore(value: str) -> str:
    if not value:
        return value
    converted = _UPPER_BOUNDARY.sub(lambda m: "_" + (m.group(1) or m.group(2)), value)
    return converted.lower()
