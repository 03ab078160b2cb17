from __future__ import annotations

import json
import typing as t

from ..errors import CinetrackError

T = t.TypeVar("T")


class CodecError(CinetrackError):
    """A value could not be encoded for, or decoded from, the store."""


class Codec(t.Protocol):
    def encode(self, value: t.Any) -> str: ...

    def decode(self, raw: str) -> t.Any: ...


class JSONCodec:
    """JSON text codec. ``decode_hook`` turns the parsed payload into a concrete type."""

    def __init__(self, decode_hook: t.Optional[t.Callable[[t.Any], t.Any]] = None) -> None:
        self._decode_hook = decode_hook

    def encode(self, value: t.Any) -> str:
        try:
            return json.dumps(value, separators=(",", ":"))
        except (TypeError, ValueError) as exc:
            raise CodecError(f"value is not JSON serializable: {exc}") from exc

    def decode(self, raw: str) -> t.Any:
        try:
            data = json.loads(raw)
        except (TypeError, ValueError) as exc:
            raise CodecError(f"malformed cached payload: {exc}") from exc
        if self._decode_hook is None:
            return data
        try:
            return self._decode_hook(data)
        except (TypeError, ValueError, KeyError) as exc:
            raise CodecError(f"cached payload has unexpected shape: {exc}") from exc
