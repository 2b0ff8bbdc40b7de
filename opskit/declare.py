"""Declaring metrics that live for the lifetime of a registry."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from typing import Any, Union

from .entry import Formatter, Metric, MetricEntry
from .metadata import Metadata
from .registry import Registry, metrics

_MetadataArg = Union[Mapping[str, str], Iterable[tuple[str, str]], None]


def _collect_metadata(metadata: _MetadataArg) -> Metadata:
    """Validate metadata pairs and return them ordered by key."""
    if metadata is None:
        return Metadata()
    pairs = metadata.items() if isinstance(metadata, Mapping) else metadata
    collected: dict[str, str] = {}
    for key, value in pairs:
        if not isinstance(key, str):
            raise TypeError(f"metadata key must be a string, not {type(key).__name__}")
        if not isinstance(value, str):
            raise TypeError(
                f"metadata value for `{key}` must be a string, not {type(value).__name__}"
            )
        if key in collected:
            raise ValueError(f"duplicate metadata entry `{key}`")
        collected[key] = value
    return Metadata(sorted(collected.items()))


def metric(
    instance: Metric | Callable[[], Metric] | None = None,
    name: str | None = None,
    description: str | None = None,
    metadata: _MetadataArg = None,
    formatter: Formatter | None = None,
    registry: Registry | None = None,
) -> Any:
    """Declare a metric and register it statically.

    `instance` is either a metric or a function returning one. When it is a
    function its name is the default metric name; a metric given directly
    needs an explicit `name`. Called without `instance`, this returns a
    decorator, so a metric can be declared as::

        @metric(description="requests served")
        def REQUESTS():
            return Counter()

    The declared metric itself is returned.
    """
    if name is not None and not isinstance(name, str):
        raise TypeError("metric name must be a string")
    if description is not None and not isinstance(description, str):
        raise TypeError("metric description must be a string")
    entry_metadata = _collect_metadata(metadata)
    target_registry = metrics(registry)

    def declare(target: Metric | Callable[[], Metric]) -> Metric:
        if isinstance(target, Metric):
            declared = target
            default_name = None
        elif callable(target):
            declared = target()
            if not isinstance(declared, Metric):
                raise TypeError(
                    f"metric factory returned {type(declared).__name__}, not a Metric"
                )
            default_name = getattr(target, "__name__", None)
        else:
            raise TypeError(f"cannot declare {type(target).__name__} as a metric")

        entry_name = name if name is not None else default_name
        if entry_name is None:
            raise ValueError("a name is required when declaring a metric instance")

        target_registry.register_static(
            MetricEntry(declared, entry_name, description, entry_metadata, formatter)
        )
        return declared

    if instance is None:
        return declare
    return declare(instance)