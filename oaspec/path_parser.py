"""Splitting of templated operation paths into literal and parameter parts."""

from __future__ import annotations

import json
from typing import Iterable

from oaspec.openapi import Parameter, ParameterLocation, Path, PathPart


def _lookup(params: Iterable[Parameter], name: str) -> Parameter | None:
    return next(
        (p for p in params if p.name == name and p.in_ == ParameterLocation.PATH),
        None,
    )


def parse_path(path: str, params: Iterable[Parameter]) -> Path:
    """Split a path such as ``/foo/{bar}`` into parts, resolving path parameters.

    Raises ValueError for unbalanced braces or unknown parameters.
    """
    params = list(params)
    parts = Path()
    current: list[str] = []
    in_param = False

    def push() -> None:
        if not current:
            return
        text = "".join(current)
        current.clear()
        if not in_param:
            parts.append(PathPart(raw=text))
            return
        param = _lookup(params, text)
        if param is None:
            raise ValueError(f"path parameter not specified: {json.dumps(text)}")
        parts.append(PathPart(param=param))

    for char in path:
        if char == "{":
            if in_param:
                raise ValueError(f"invalid path: {path}")
            push()
            in_param = True
        elif char == "}":
            if not in_param:
                raise ValueError(f"invalid path: {path}")
            push()
            in_param = False
        elif char == "/" and in_param:
            raise ValueError(f"invalid path: {path}")
        else:
            current.append(char)

    if in_param:
        raise ValueError(f"invalid path: {path}")
    push()
    return parts