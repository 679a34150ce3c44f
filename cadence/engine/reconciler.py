"""Merge per-occurrence overrides onto generated instances."""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Iterable, Mapping

from cadence.domain.entities import OVERRIDABLE_FIELDS, Override, VirtualInstance
from cadence.domain.enums import TaskStatus

logger = logging.getLogger(__name__)


def _coerce(name: str, value: Any) -> Any:
    if name == "status":
        return TaskStatus(value)
    if name == "assignee_ids":
        if isinstance(value, str):
            raise ValueError("assignee_ids must be a list")
        return tuple(value or ())
    if name == "skipped":
        return bool(value)
    return value


def index_overrides(
    overrides: Mapping[str, Override] | Iterable[Override],
) -> Mapping[str, Override]:
    if isinstance(overrides, Mapping):
        return overrides
    return {override.id: override for override in overrides}


def apply_override(instance: VirtualInstance, override: Override) -> VirtualInstance:
    changes: dict[str, Any] = {}
    for name, value in override.fields.items():
        if name not in OVERRIDABLE_FIELDS:
            logger.debug("Ignoring unknown override field %s on %s", name, instance.id)
            continue
        try:
            changes[name] = _coerce(name, value)
        except (ValueError, TypeError) as exc:
            logger.warning("Dropping override field %s on %s: %s", name, instance.id, exc)
    if not changes:
        return instance
    return replace(instance, overrides=dict(changes), **changes)


def reconcile(
    instances: Iterable[VirtualInstance],
    overrides: Mapping[str, Override] | Iterable[Override],
) -> list[VirtualInstance]:
    """Return ``instances`` with any matching override applied.

    Overrides are matched on the ``template_date`` key. Instances are never
    added or dropped here; skipped ones keep their place with ``skipped=True``
    and are removed by :func:`visible`.
    """
    lookup = index_overrides(overrides)
    merged = []
    for instance in instances:
        override = lookup.get(instance.id)
        merged.append(apply_override(instance, override) if override else instance)
    return merged


def visible(instances: Iterable[VirtualInstance]) -> list[VirtualInstance]:
    return [instance for instance in instances if not instance.skipped]
