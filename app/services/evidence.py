"""Mine source URLs out of research tool results.

Tool payloads come straight from the search provider and their shape is not
guaranteed. Every read goes through ``read_field`` so a missing key, a null or
a value of the wrong type just means "nothing here".
"""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, TypeVar

T = TypeVar("T")

_SEQUENCE_TYPES = (list, tuple)


def read_field(container: Any, key: str, kind: type[T] | tuple[type, ...]) -> T | None:
    """Return ``container[key]`` (or ``container.key``) if it is a ``kind``, else None."""
    if container is None:
        return None
    if isinstance(container, Mapping):
        value = container.get(key)
    else:
        value = getattr(container, key, None)
    if isinstance(value, bool) and bool not in _as_tuple(kind):
        return None
    return value if isinstance(value, kind) else None


def _as_tuple(kind: type | tuple[type, ...]) -> tuple[type, ...]:
    return kind if isinstance(kind, tuple) else (kind,)


def _iter_items(value: Any) -> Iterable[Any]:
    return value if isinstance(value, _SEQUENCE_TYPES) else ()


def urls_from_payload(payload: Any) -> list[str]:
    """URLs of a single search payload shaped like ``{"results": [{"url": ...}]}``."""
    urls: list[str] = []
    for item in _iter_items(read_field(payload, "results", _SEQUENCE_TYPES)):
        if not isinstance(item, Mapping):
            continue
        url = read_field(item, "url", str)
        if url is not None:
            urls.append(url)
    return urls


def extract_source_urls(steps: Any) -> list[str]:
    """Collect every result URL across all steps, in production order.

    Duplicates are kept. Never raises.
    """
    sources: list[str] = []
    for step in _iter_items(steps):
        for tool_result in _iter_items(read_field(step, "tool_results", _SEQUENCE_TYPES)):
            sources.extend(urls_from_payload(read_field(tool_result, "output", Mapping)))
    return sources
