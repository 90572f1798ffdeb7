"""Failure classification predicates.

A classification step decides whether a failure payload is handled by
testing it against a class spec:

- ``matches_type``: the payload is an instance of any listed class,
  subclasses included.
- ``matches_exact_type``: the payload is an instance of a listed class AND its
  runtime type is that very class.
- ``is_error_like``: the payload is an exception object.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from caught.core.errors import ClassSpecError

type ClassSpec[X] = type[X] | Sequence[type[X]]
"""A single class or a non-empty list/tuple of classes."""


def normalize_class_spec(class_spec: Any) -> tuple[type, ...]:
    """Turn a class spec into a non-empty tuple of classes.

    Args:
        class_spec: A class, or a non-empty list or tuple of classes.

    Returns:
        The listed classes, in order.

    Raises:
        ClassSpecError: If the spec is empty or lists something that is not a class.
    """
    if isinstance(class_spec, type):
        return (class_spec,)

    if not isinstance(class_spec, (list, tuple)):
        msg = f"Expected a class or a list of classes, got {type(class_spec).__name__}"
        raise ClassSpecError(msg, class_spec=class_spec)

    if not class_spec:
        msg = "Class list must not be empty"
        raise ClassSpecError(msg, class_spec=class_spec)

    for entry in class_spec:
        if not isinstance(entry, type):
            msg = f"Class list entries must be classes, got {type(entry).__name__}"
            raise ClassSpecError(msg, class_spec=class_spec)

    return tuple(class_spec)


def matches_type(payload: Any, classes: tuple[type, ...]) -> bool:
    """Return True if payload is an instance of any of the classes."""
    return any(isinstance(payload, cls) for cls in classes)


def matches_exact_type(payload: Any, classes: tuple[type, ...]) -> bool:
    """Return True if payload's runtime type is exactly one of the classes.

    Both checks must hold for the same entry; an object that fakes its
    ``__class__`` passes isinstance but not the identity check.
    None is an ordinary value here: it matches only when ``NoneType`` is listed.
    """
    runtime_type = type(payload)
    return any(isinstance(payload, cls) and runtime_type is cls for cls in classes)


def is_error_like(value: Any) -> bool:
    """Return True if value is an exception object."""
    return isinstance(value, BaseException)
