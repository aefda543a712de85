"""
Helpers for moving set-typed configuration values to and from the ordered lists Kibana expects on the wire.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from numbers import Real
from typing import Any, Iterable, List, Optional


def _sort_key(item: Any) -> tuple:
    if isinstance(item, Real) and not isinstance(item, bool):
        return (0, item, "")
    return (1, 0, f"{type(item).__name__}:{item}")


def expand_list(values: Optional[Iterable[Any]]) -> List[Any]:
    """Sets come out sorted so one configuration always yields the same payload."""
    if values is None:
        return []
    if isinstance(values, (set, frozenset)):
        return sorted(values, key=_sort_key)
    if isinstance(values, (str, bytes)):
        return [values]
    return list(values)


def expand_string_list(values: Optional[Iterable[Any]]) -> List[str]:
    return [str(item) for item in expand_list(values) if item is not None and str(item) != ""]


def flatten_string_list(values: Optional[Iterable[Any]]) -> List[str]:
    return [str(item) for item in expand_list(values)]


def flatten_float_list(values: Optional[Iterable[Any]]) -> List[float]:
    return [float(item) for item in expand_list(values)]
