"""Caller-defined query parameter parsing.

A params parser is any callable taking a ``lookup`` function and returning
the ``params`` value stored in the cursor. ``lookup(name)`` returns the raw
text of a query parameter, or None when it is absent; whether absence is an
error is decided by the parser. Parsers signal failures with
:class:`ParameterParseError`, usually through :func:`fail`.

:class:`ParamsParser` covers the common case declaratively::

    parser = ParamsParser(
        required("teacherId", int),
        optional("courseId", int),
        build=AssignmentFilters,
    )
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, NoReturn, Optional

from pydantic import ValidationError

from ..errors.problem_details import ParameterParseError


Lookup = Callable[[str], Optional[str]]


def fail(message: str, parameter: Optional[str] = None) -> NoReturn:
    """Abort parameter parsing with a client error."""
    raise ParameterParseError(message, parameter=parameter)


def no_params(lookup: Lookup) -> None:
    """Parser for endpoints without caller-defined parameters."""
    return None


@dataclass(frozen=True)
class ParamField:
    """A single named query parameter read by :class:`ParamsParser`."""

    name: str
    convert: Callable[[str], Any] = str
    is_required: bool = False
    default: Any = None

    def read(self, lookup: Lookup) -> Any:
        raw = lookup(self.name)
        if raw is None:
            if self.is_required:
                fail(f"Missing required query parameter '{self.name}'", self.name)
            return self.default
        try:
            return self.convert(raw)
        except (TypeError, ValueError) as e:
            raise ParameterParseError(
                f"Invalid value for query parameter '{self.name}': {e}",
                parameter=self.name
            ) from e


def required(name: str, convert: Callable[[str], Any] = str) -> ParamField:
    """Declare a query parameter that must be present."""
    return ParamField(name=name, convert=convert, is_required=True)


def optional(name: str, convert: Callable[[str], Any] = str, default: Any = None) -> ParamField:
    """Declare a query parameter that falls back to ``default`` when absent."""
    return ParamField(name=name, convert=convert, default=default)


class ParamsParser:
    """Read a fixed list of query parameters and build the params value.

    Fields are read in declaration order. The collected values are passed to
    ``build`` as keyword arguments keyed by parameter name.
    """

    def __init__(self, *fields: ParamField, build: Callable[..., Any] = dict):
        names = [field.name for field in fields]
        if len(names) != len(set(names)):
            raise ValueError(f"Duplicate parameter names: {names}")
        self.fields = fields
        self.build = build

    def __call__(self, lookup: Lookup) -> Any:
        values: Dict[str, Any] = {}
        for field in self.fields:
            values[field.name] = field.read(lookup)
        try:
            return self.build(**values)
        except ValidationError as e:
            details = "; ".join(
                f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
                for error in e.errors()
            )
            raise ParameterParseError(f"Invalid query parameters: {details}") from e
