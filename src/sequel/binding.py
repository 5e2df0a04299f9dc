"""
Name-based binding between Python objects and statement placeholders.

Parameter side: the members of the object handed to a prepared command at
preparation time fix the statement's placeholder list, one placeholder per
member, named after it. Every later run reads the same member names off the
new values object and assigns them to those placeholders.

The helpers for the result side (`writable_members`, `constructor_parameters`)
live here as well so all type-shape introspection is in one place.
"""
import dataclasses
import inspect
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar, get_origin

import pandas as pd
from sequel.exceptions import InvalidOperationError, MissingMemberError
from sequel.exceptions import ValidationError

if TYPE_CHECKING:
    from sequel.statement import Parameter, Statement

logger = logging.getLogger(__name__)

__all__ = [
    'ParameterBinding',
    'assign_parameters',
    'bind_parameters',
    'constructor_parameters',
    'read_member',
    'readable_members',
    'requires_arguments',
    'writable_members',
]

_VARIADIC = {inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD}


@dataclass(slots=True)
class ParameterBinding:
    """A source member paired with the placeholder it feeds."""
    member: str
    parameter: 'Parameter'


def _is_public(name: Any) -> bool:
    return isinstance(name, str) and not name.startswith('_')


def _is_namedtuple(obj: Any) -> bool:
    return isinstance(obj, tuple) and hasattr(type(obj), '_fields')


def _slot_names(cls: type) -> list[str]:
    slots = cls.__dict__.get('__slots__', ())
    if isinstance(slots, str):
        slots = (slots,)
    return [s for s in slots if s not in {'__dict__', '__weakref__'}]


def _is_class_data(attr: Any) -> bool:
    return not callable(attr) and not hasattr(attr, '__get__')


def _object_members(source: Any) -> list[str]:
    """Public data attributes, then readable properties, of a plain object."""
    names: list[str] = []

    for name, value in getattr(source, '__dict__', {}).items():
        if _is_public(name) and not callable(value):
            names.append(name)

    for cls in type(source).__mro__:
        for name in _slot_names(cls):
            if _is_public(name) and name not in names and hasattr(source, name):
                names.append(name)

    for cls in reversed(type(source).__mro__):
        if cls is object:
            continue
        for name, attr in vars(cls).items():
            if _is_public(name) and name not in names and _is_class_data(attr):
                names.append(name)

    for cls in type(source).__mro__:
        for name, attr in vars(cls).items():
            if isinstance(attr, property) and attr.fget is not None \
               and _is_public(name) and name not in names:
                names.append(name)

    return names


def readable_members(source: Any) -> list[str]:
    """Enumerate the member names of a parameter object in declaration order.

    Mappings stand in for anonymous objects and contribute their keys.

    >>> readable_members({'Key': 'a', 'Value': 1})
    ['Key', 'Value']
    >>> readable_members(None)
    []
    """
    if source is None:
        return []

    if isinstance(source, type):
        raise ValidationError(f'Parameters must be an object, not the type {source.__name__}')

    if isinstance(source, Mapping):
        names = list(source.keys())
    elif isinstance(source, pd.Series):
        names = list(source.index)
    elif _is_namedtuple(source):
        names = list(source._fields)
    elif dataclasses.is_dataclass(source):
        names = [f.name for f in dataclasses.fields(source)]
    else:
        return _object_members(source)

    for name in names:
        if not isinstance(name, str):
            raise ValidationError(f'Parameter names must be strings, got {name!r}')
    return names


def read_member(source: Any, name: str) -> Any:
    """Read one named member from a parameter object.
    """
    if isinstance(source, Mapping | pd.Series):
        try:
            return source[name]
        except KeyError:
            raise MissingMemberError(
                f'{type(source).__name__} has no member {name!r}') from None
    try:
        return getattr(source, name)
    except AttributeError:
        raise MissingMemberError(
            f'{type(source).__name__} has no member {name!r}') from None


def bind_parameters(statement: 'Statement', shape: Any) -> list[ParameterBinding] | None:
    """Declare one placeholder per member of ``shape`` on the statement.

    Returns None when no shape was given, which is remembered so that later
    runs with values can be rejected.
    """
    if shape is None:
        return None

    bindings = [ParameterBinding(name, statement.add_parameter(name))
                for name in readable_members(shape)]
    logger.debug(f'Declared {len(bindings)} parameters from {type(shape).__name__}')
    return bindings


def assign_parameters(bindings: list[ParameterBinding] | None, values: Any) -> None:
    """Copy member values from ``values`` into the bound placeholders.

    Absent values leave every placeholder at its previous value.
    """
    if values is None:
        return

    if bindings is None:
        raise InvalidOperationError('Parameters have to be specified when the command is prepared')

    for binding in bindings:
        binding.parameter.value = read_member(values, binding.member)


# Result-side type introspection


def _is_classvar(annotation: Any) -> bool:
    if isinstance(annotation, str):
        return annotation.startswith(('ClassVar', 'typing.ClassVar'))
    return annotation is ClassVar or get_origin(annotation) is ClassVar


def _is_read_only(target: type, name: str) -> bool:
    try:
        attr = inspect.getattr_static(target, name)
    except AttributeError:
        return False
    if isinstance(attr, property):
        return attr.fset is None
    return callable(attr) and not isinstance(attr, type)


def writable_members(target: type, sample: Any = None) -> list[str]:
    """Enumerate the attribute names that can be assigned on instances of ``target``.

    Attributes a class only creates in ``__init__`` are found through
    ``sample``, an instance of ``target``. Frozen dataclasses have none.
    """
    if dataclasses.is_dataclass(target) and target.__dataclass_params__.frozen:
        return []

    names: list[str] = []
    class_vars: set[str] = set()

    def add(name: str) -> None:
        if _is_public(name) and name not in names and name not in class_vars:
            names.append(name)

    for cls in reversed(target.__mro__):
        if cls is object:
            continue
        for name, annotation in inspect.get_annotations(cls).items():
            if _is_classvar(annotation):
                class_vars.add(name)
            else:
                add(name)
        for name in _slot_names(cls):
            add(name)
        for name, attr in vars(cls).items():
            if isinstance(attr, property):
                if attr.fset is not None:
                    add(name)
            elif not callable(attr) and not isinstance(attr, classmethod | staticmethod):
                add(name)

    for name, value in getattr(sample, '__dict__', {}).items():
        if not callable(value):
            add(name)

    return [name for name in names if not _is_read_only(target, name)]


def constructor_parameters(target: type) -> list[inspect.Parameter]:
    """Enumerate the constructor parameters of ``target`` in slot order.
    """
    try:
        signature = inspect.signature(target)
    except (TypeError, ValueError) as err:
        raise ValidationError(f'Cannot inspect the constructor of {target!r}: {err}') from err
    return [p for p in signature.parameters.values() if p.kind not in _VARIADIC]


def requires_arguments(target: type) -> bool:
    """Check whether ``target()`` would be missing required arguments.
    """
    try:
        signature = inspect.signature(target)
    except (TypeError, ValueError):
        return False
    return any(p.default is inspect.Parameter.empty and p.kind not in _VARIADIC
               for p in signature.parameters.values())
