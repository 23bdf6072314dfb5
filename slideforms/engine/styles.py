"""Style command interpreter.

Maps the closed set of style operations to setter functions over the field
variants. Commands are validated against the field kind when a spec is
accepted, then applied in order to each materialized field.
"""

import logging
from collections.abc import Callable, Iterable
from numbers import Real
from typing import Any

from slideforms.engine.models import StyleCommand, StyleOperation
from slideforms.interfaces.document import (
    CheckBoxField,
    DropdownField,
    FieldType,
    FormField,
    RadioGroupField,
    TextAlignment,
    TextField,
)
from slideforms.interfaces.errors import ValidationError

logger = logging.getLogger(__name__)

_COMMON = frozenset(
    {
        StyleOperation.ENABLE_READ_ONLY,
        StyleOperation.DISABLE_READ_ONLY,
        StyleOperation.ENABLE_REQUIRED,
        StyleOperation.DISABLE_REQUIRED,
        StyleOperation.SET_BORDER_WIDTH,
        StyleOperation.SET_BORDER_COLOR,
        StyleOperation.SET_BACKGROUND_COLOR,
        StyleOperation.SET_TEXT_COLOR,
    }
)

SUPPORTED_OPERATIONS: dict[FieldType, frozenset[StyleOperation]] = {
    FieldType.TEXTBOX: _COMMON
    | {
        StyleOperation.SET_TEXT,
        StyleOperation.SET_ALIGNMENT,
        StyleOperation.SET_FONT_SIZE,
        StyleOperation.SET_MAX_LENGTH,
        StyleOperation.ENABLE_MULTILINE,
        StyleOperation.DISABLE_MULTILINE,
        StyleOperation.ENABLE_SCROLLING,
        StyleOperation.DISABLE_SCROLLING,
    },
    FieldType.CHECKBOX: _COMMON | {StyleOperation.CHECK, StyleOperation.UNCHECK},
    FieldType.DROPDOWNLIST: _COMMON
    | {
        StyleOperation.SELECT,
        StyleOperation.ADD_OPTIONS,
        StyleOperation.SET_OPTIONS,
        StyleOperation.SET_FONT_SIZE,
    },
    FieldType.RADIOBUTTON: _COMMON | {StyleOperation.SELECT},
}


def _as_alignment(value: Any) -> TextAlignment:
    try:
        return TextAlignment(str(value).strip().lower())
    except ValueError as e:
        raise ValidationError(
            f"Invalid alignment '{value}'. Valid options: 'left', 'center', 'right'"
        ) from e


def _as_number(operation: StyleOperation, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, Real) or value < 0:
        raise ValidationError(f"'{operation.value}' expects a non-negative number, got {value!r}")
    return float(value)


def _as_options(operation: StyleOperation, value: Any) -> list[str]:
    if isinstance(value, str):
        return [value]
    if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
        raise ValidationError(f"'{operation.value}' expects a list of strings, got {value!r}")
    return list(value)


def _as_color(operation: StyleOperation, value: Any) -> list[float] | None:
    if value is None:
        return None
    if (
        not isinstance(value, (list, tuple))
        or len(value) != 3
        or not all(isinstance(c, Real) and not isinstance(c, bool) and 0 <= c <= 1 for c in value)
    ):
        raise ValidationError(f"'{operation.value}' expects [r, g, b] in 0..1, got {value!r}")
    return [float(c) for c in value]


def _check_value(command: StyleCommand) -> None:
    """Validate a command payload without a field at hand."""
    op, value = command.operation, command.value
    match op:
        case StyleOperation.SET_ALIGNMENT:
            _as_alignment(value)
        case StyleOperation.SET_FONT_SIZE | StyleOperation.SET_BORDER_WIDTH:
            _as_number(op, value)
        case StyleOperation.SET_MAX_LENGTH:
            if value is not None and (isinstance(value, bool) or not isinstance(value, int) or value < 0):
                raise ValidationError(f"'{op.value}' expects a non-negative integer, got {value!r}")
        case StyleOperation.ADD_OPTIONS | StyleOperation.SET_OPTIONS:
            _as_options(op, value)
        case StyleOperation.SELECT:
            if not isinstance(value, str) or not value:
                raise ValidationError(f"'{op.value}' expects a non-empty string, got {value!r}")
        case (
            StyleOperation.SET_BORDER_COLOR
            | StyleOperation.SET_BACKGROUND_COLOR
            | StyleOperation.SET_TEXT_COLOR
        ):
            _as_color(op, value)


def _ensure_supported(field_type: FieldType, command: StyleCommand) -> None:
    if command.operation not in SUPPORTED_OPERATIONS[field_type]:
        raise ValidationError(
            f"Operation '{command.operation.value}' is not supported by {field_type.value} fields."
        )


def validate_commands(field_type: FieldType, commands: Iterable[StyleCommand]) -> None:
    """Reject commands the field kind does not accept or whose payload is malformed.

    Raises:
        ValidationError: On the first invalid command.
    """
    for command in commands:
        _ensure_supported(field_type, command)
        _check_value(command)


# Setters. Each receives the variant the operation is registered for.

def _set_text(field: TextField, value: Any) -> None:
    field.set_text("" if value is None else str(value))


def _set_alignment(field: TextField, value: Any) -> None:
    field.set_alignment(_as_alignment(value))


def _set_font_size(field: TextField | DropdownField, value: Any) -> None:
    field.set_font_size(_as_number(StyleOperation.SET_FONT_SIZE, value))


def _set_max_length(field: TextField, value: Any) -> None:
    field.set_max_length(value)


def _select(field: DropdownField | RadioGroupField, value: Any) -> None:
    field.select(str(value))


def _add_options(field: DropdownField, value: Any) -> None:
    field.add_options(_as_options(StyleOperation.ADD_OPTIONS, value))


def _set_options(field: DropdownField, value: Any) -> None:
    field.set_options(_as_options(StyleOperation.SET_OPTIONS, value))


def _set_border_width(field: FormField, value: Any) -> None:
    field.set_border_width(_as_number(StyleOperation.SET_BORDER_WIDTH, value))


_SETTERS: dict[StyleOperation, Callable[[Any, Any], None]] = {
    StyleOperation.SET_TEXT: _set_text,
    StyleOperation.SET_ALIGNMENT: _set_alignment,
    StyleOperation.SET_FONT_SIZE: _set_font_size,
    StyleOperation.SET_MAX_LENGTH: _set_max_length,
    StyleOperation.ENABLE_MULTILINE: lambda f, _: f.set_multiline(True),
    StyleOperation.DISABLE_MULTILINE: lambda f, _: f.set_multiline(False),
    StyleOperation.ENABLE_SCROLLING: lambda f, _: f.set_scrolling(True),
    StyleOperation.DISABLE_SCROLLING: lambda f, _: f.set_scrolling(False),
    StyleOperation.ENABLE_READ_ONLY: lambda f, _: f.set_read_only(True),
    StyleOperation.DISABLE_READ_ONLY: lambda f, _: f.set_read_only(False),
    StyleOperation.ENABLE_REQUIRED: lambda f, _: f.set_required(True),
    StyleOperation.DISABLE_REQUIRED: lambda f, _: f.set_required(False),
    StyleOperation.CHECK: lambda f, _: f.set_checked(True),
    StyleOperation.UNCHECK: lambda f, _: f.set_checked(False),
    StyleOperation.SELECT: _select,
    StyleOperation.ADD_OPTIONS: _add_options,
    StyleOperation.SET_OPTIONS: _set_options,
    StyleOperation.SET_BORDER_WIDTH: _set_border_width,
    StyleOperation.SET_BORDER_COLOR: lambda f, v: f.set_border_color(
        _as_color(StyleOperation.SET_BORDER_COLOR, v)
    ),
    StyleOperation.SET_BACKGROUND_COLOR: lambda f, v: f.set_background_color(
        _as_color(StyleOperation.SET_BACKGROUND_COLOR, v)
    ),
    StyleOperation.SET_TEXT_COLOR: lambda f, v: f.set_text_color(
        _as_color(StyleOperation.SET_TEXT_COLOR, v)
    ),
}


def apply_commands(field: FormField, commands: Iterable[StyleCommand]) -> None:
    """Apply style commands to a field in listed order.

    List payloads are copied per call so fields built from the same spec
    never share backing storage.
    """
    for command in commands:
        _ensure_supported(field.kind, command)
        value = command.value
        if isinstance(value, list):
            value = list(value)
        _SETTERS[command.operation](field, value)
        logger.debug(f"Applied {command.operation.value} to {field.name}")
