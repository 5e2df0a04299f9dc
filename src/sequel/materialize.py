"""
Row materialization: turning reader rows into Python values.

Each materializer implements ``create_item(reader)`` and is called once per
row by a row query. Column bindings are worked out from the reader's column
names on the first row and reused for every row after it.

- `PropertyMaterializer`: instantiate with no arguments, assign attributes
- `ConstructorMaterializer`: pass columns as constructor arguments
- `ColumnMaterializer`: first column only, coerced to a type
- `RowMaterializer`: the whole row as an attribute dictionary
"""
import inspect
import logging
from typing import Any, Generic, Protocol, TypeVar

from sequel.binding import constructor_parameters, requires_arguments
from sequel.binding import writable_members
from sequel.coercion import coerce_value, normalize_null
from sequel.exceptions import InvalidOperationError, ValidationError
from sequel.statement import Reader

from libb import attrdict

logger = logging.getLogger(__name__)

T = TypeVar('T')
T_co = TypeVar('T_co', covariant=True)

__all__ = [
    'ColumnMaterializer',
    'ConstructorMaterializer',
    'Materializer',
    'PropertyMaterializer',
    'RowMaterializer',
    'default_for',
]

_TYPE_DEFAULTS: dict[Any, Any] = {
    int: 0,
    float: 0.0,
    bool: False,
    str: '',
    bytes: b'',
    'int': 0,
    'float': 0.0,
    'bool': False,
    'str': '',
    'bytes': b'',
}


class Materializer(Protocol[T_co]):
    """Builds one item from the current row of a reader."""

    def create_item(self, reader: Reader) -> T_co:
        ...


def _column_names(reader: Reader) -> list[str]:
    return [reader.column_name(index) for index in range(reader.field_count)]


class PropertyMaterializer(Generic[T]):
    """Instantiate ``target()`` per row and assign matching columns as attributes.

    Only columns whose names equal a writable attribute of ``target`` are
    used. A result with no such column is an error, raised on the first row.
    """

    def __init__(self, target: type[T]) -> None:
        if not isinstance(target, type):
            raise ValidationError(f'Query target must be a type, got {target!r}')
        if requires_arguments(target):
            raise ValidationError(f'{target.__name__} must be constructible without arguments')
        self.target = target
        self._indexed_properties: list[tuple[int, str]] | None = None

    def _create_indexed_properties(self, reader: Reader) -> list[tuple[int, str]]:
        writable = set(writable_members(self.target, self.target()))
        result = [(index, name) for index, name in enumerate(_column_names(reader))
                  if name in writable]
        logger.debug(f'Mapped {len(result)} of {reader.field_count} columns to {self.target.__name__} attributes')
        return result

    def create_item(self, reader: Reader) -> T:
        if self._indexed_properties is None:
            self._indexed_properties = self._create_indexed_properties(reader)

        if not self._indexed_properties:
            raise InvalidOperationError('No properties on the object type match columns in the result')

        item = self.target()
        for index, name in self._indexed_properties:
            setattr(item, name, normalize_null(reader.value(index)))
        return item


def default_for(parameter: inspect.Parameter) -> Any:
    """Value a constructor slot receives when no column matches it.

    >>> default_for(inspect.Parameter('Value', inspect.Parameter.POSITIONAL_OR_KEYWORD, annotation=int))
    0
    >>> default_for(inspect.Parameter('Key', inspect.Parameter.POSITIONAL_OR_KEYWORD)) is None
    True
    """
    if parameter.default is not inspect.Parameter.empty:
        return parameter.default
    return _TYPE_DEFAULTS.get(parameter.annotation)


class ConstructorMaterializer(Generic[T]):
    """Call the constructor of ``target`` per row with columns matched to parameters by name.

    ``target`` may also be a template instance, whose type is used. Columns
    without a matching parameter are ignored, and parameters without a
    matching column get `default_for` them, so a result that matches nothing
    still produces one default-built item per row.
    """

    def __init__(self, target: type[T] | T) -> None:
        if not isinstance(target, type):
            target = type(target)
        self.target = target
        self._parameters: list[inspect.Parameter] | None = None
        self._indexed_parameters: list[tuple[int, int]] | None = None

    def _create_indexed_parameters(self, reader: Reader) -> list[tuple[int, int]]:
        slots = {parameter.name: slot for slot, parameter in enumerate(self._parameters)}
        result = [(index, slots[name]) for index, name in enumerate(_column_names(reader))
                  if name in slots]
        logger.debug(f'Mapped {len(result)} of {reader.field_count} columns to {self.target.__name__} constructor')
        return result

    def create_item(self, reader: Reader) -> T:
        if self._parameters is None:
            self._parameters = constructor_parameters(self.target)
        if self._indexed_parameters is None:
            self._indexed_parameters = self._create_indexed_parameters(reader)

        values = [default_for(parameter) for parameter in self._parameters]
        for index, slot in self._indexed_parameters:
            values[slot] = normalize_null(reader.value(index))

        args, kwargs = [], {}
        for parameter, value in zip(self._parameters, values):
            if parameter.kind is inspect.Parameter.KEYWORD_ONLY:
                kwargs[parameter.name] = value
            else:
                args.append(value)
        return self.target(*args, **kwargs)


class ColumnMaterializer(Generic[T]):
    """Take the first column of each row, coerced to ``target``."""

    def __init__(self, target: Any = object) -> None:
        self.target = target

    def create_item(self, reader: Reader) -> T:
        return coerce_value(reader.value(0), self.target)


class RowMaterializer:
    """Return each row as an attrdict keyed by column name."""

    def __init__(self) -> None:
        self._names: list[str] | None = None

    def create_item(self, reader: Reader) -> attrdict:
        if self._names is None:
            self._names = _column_names(reader)
        return attrdict({name: normalize_null(reader.value(index))
                         for index, name in enumerate(self._names)})
