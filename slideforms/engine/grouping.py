"""Bucketing of field descriptors into the page, type, group tree."""

from typing import Iterable

from slideforms.engine.models import FieldDescriptor
from slideforms.interfaces.document import FieldType

FieldGroups = dict[int, dict[FieldType, dict[str, list[FieldDescriptor]]]]


def group_descriptors(descriptors: Iterable[FieldDescriptor]) -> FieldGroups:
    """Group descriptors by page, then type, then group.

    Every level keeps first-seen order. Types are expected to be validated
    upstream.
    """
    groups: FieldGroups = {}
    for descriptor in descriptors:
        by_type = groups.setdefault(descriptor.page, {})
        by_group = by_type.setdefault(descriptor.field_type, {})
        by_group.setdefault(descriptor.group, []).append(descriptor)
    return groups
