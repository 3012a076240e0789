"""Position codec: lossless JSON serialization of page positions."""

from typing import Any, Generic, TypeVar, Union

from pydantic import TypeAdapter, ValidationError


PositionT = TypeVar("PositionT")


class PositionDecodeError(ValueError):
    """Raised when a serialized position cannot be turned back into a value."""


class PositionCodec(Generic[PositionT]):
    """Encode and decode positions of a given type.

    A position identifies where in an ordered result set a page ended. The
    codec imposes no ordering semantics, it only guarantees that
    ``decode(encode(p)) == p`` for every valid ``p``.

    Args:
        position_type: Any type pydantic can validate (``int``, ``UUID``,
            a tuple of fields, a model). Defaults to ``Any`` which accepts
            arbitrary JSON values.
    """

    def __init__(self, position_type: Any = Any):
        self.position_type = position_type
        self._adapter = TypeAdapter(position_type)

    def encode(self, position: PositionT) -> bytes:
        """Serialize a position to compact JSON bytes."""
        return self._adapter.dump_json(position)

    def decode(self, raw: Union[bytes, str]) -> PositionT:
        """Deserialize a position previously produced by :meth:`encode`.

        Raises:
            PositionDecodeError: If ``raw`` is not valid JSON for the position type
        """
        try:
            return self._adapter.validate_json(raw)
        except ValidationError as e:
            raise PositionDecodeError(f"Invalid position: {e}") from e

    def to_json_value(self, position: PositionT) -> Any:
        """Convert a position to a JSON-compatible Python value."""
        return self._adapter.dump_python(position, mode="json")

    def from_json_value(self, value: Any) -> PositionT:
        """Validate a JSON-compatible Python value as a position.

        Raises:
            PositionDecodeError: If ``value`` does not validate against the position type
        """
        try:
            return self._adapter.validate_python(value)
        except ValidationError as e:
            raise PositionDecodeError(f"Invalid position: {e}") from e
