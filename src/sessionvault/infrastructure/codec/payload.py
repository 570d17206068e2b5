"""Self-describing payload codec built on tagged pydantic wire models.

Every claim value is wrapped as ``{"kind": ..., "value": ...}`` so a decoder
never needs a per-claim schema. The envelope carries a schema version that is
checked before the claims are parsed.
"""

from __future__ import annotations

import base64
import binascii
from collections.abc import Mapping
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic_core import PydanticSerializationError

from sessionvault.application.ports.payload_codec import PayloadCodecPort
from sessionvault.domain.token import Claims, ClaimValue, TokenPayload
from sessionvault.errors import (
    PayloadDecodeError,
    PayloadEncodeError,
    UnsupportedSchemaVersionError,
)

PAYLOAD_SCHEMA_VERSION = 1
MAX_CLAIM_DEPTH = 64


class _WireModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        strict=True,
        extra="forbid",
        ser_json_inf_nan="constants",
    )


class StrClaim(_WireModel):
    kind: Literal["str"] = "str"
    value: str


class IntClaim(_WireModel):
    kind: Literal["int"] = "int"
    value: int


class FloatClaim(_WireModel):
    kind: Literal["float"] = "float"
    value: float


class BoolClaim(_WireModel):
    kind: Literal["bool"] = "bool"
    value: bool


class NullClaim(_WireModel):
    kind: Literal["null"] = "null"
    value: None = None


class BytesClaim(_WireModel):
    kind: Literal["bytes"] = "bytes"
    value: str  # base64


class ListClaim(_WireModel):
    kind: Literal["list"] = "list"
    value: list[ClaimNode]


class MapClaim(_WireModel):
    kind: Literal["map"] = "map"
    value: dict[str, ClaimNode]


ClaimNode = Annotated[
    StrClaim | IntClaim | FloatClaim | BoolClaim | NullClaim | BytesClaim | ListClaim | MapClaim,
    Field(discriminator="kind"),
]

ListClaim.model_rebuild()
MapClaim.model_rebuild()


class _VersionProbe(BaseModel):
    model_config = ConfigDict(extra="ignore")

    version: int


class PayloadEnvelope(_WireModel):
    version: int
    principal: str
    expires_at: int
    claims: dict[str, ClaimNode]


def _to_node(value: object, path: str, depth: int) -> ClaimNode:
    if depth > MAX_CLAIM_DEPTH:
        raise PayloadEncodeError(f"claim {path!r} nests deeper than {MAX_CLAIM_DEPTH} levels")
    if value is None:
        return NullClaim()
    if isinstance(value, bool):
        return BoolClaim(value=value)
    if isinstance(value, int):
        return IntClaim(value=int(value))
    if isinstance(value, float):
        return FloatClaim(value=value)
    if isinstance(value, str):
        return StrClaim(value=value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return BytesClaim(value=base64.b64encode(bytes(value)).decode("ascii"))
    if isinstance(value, Mapping):
        return MapClaim(value=_to_nodes(value, path, depth + 1))
    if isinstance(value, (list, tuple)):
        return ListClaim(
            value=[_to_node(item, f"{path}[{idx}]", depth + 1) for idx, item in enumerate(value)]
        )
    raise PayloadEncodeError(
        f"claim {path!r} has unsupported type {type(value).__name__}"
    )


def _to_nodes(claims: Mapping[Any, Any], path: str, depth: int) -> dict[str, ClaimNode]:
    nodes: dict[str, ClaimNode] = {}
    for key, value in claims.items():
        if not isinstance(key, str):
            raise PayloadEncodeError(
                f"claim keys must be strings, got {type(key).__name__} under {path or 'claims'!r}"
            )
        child = f"{path}.{key}" if path else key
        nodes[key] = _to_node(value, child, depth)
    return nodes


def _from_node(node: ClaimNode) -> ClaimValue:
    if isinstance(node, BytesClaim):
        try:
            return base64.b64decode(node.value.encode("ascii"), validate=True)
        except (binascii.Error, ValueError) as exc:
            raise PayloadDecodeError("bytes claim is not valid base64") from exc
    if isinstance(node, ListClaim):
        return [_from_node(item) for item in node.value]
    if isinstance(node, MapClaim):
        return _from_nodes(node.value)
    return node.value


def _from_nodes(nodes: Mapping[str, ClaimNode]) -> Claims:
    return {key: _from_node(node) for key, node in nodes.items()}


class PayloadCodec(PayloadCodecPort):
    """Encodes token payloads as versioned, tagged UTF-8 JSON."""

    def __init__(self, *, version: int = PAYLOAD_SCHEMA_VERSION) -> None:
        self._version = version

    @property
    def version(self) -> int:
        return self._version

    def encode(self, payload: TokenPayload) -> bytes:
        if not isinstance(payload.claims, Mapping):
            raise PayloadEncodeError("claims must be a mapping")
        claims = _to_nodes(payload.claims, "", 1)
        try:
            envelope = PayloadEnvelope(
                version=self._version,
                principal=payload.principal,
                expires_at=payload.expires_at,
                claims=claims,
            )
            return envelope.model_dump_json().encode("utf-8")
        except (ValidationError, PydanticSerializationError) as exc:  # pragma: no cover - guarded by _to_node
            raise PayloadEncodeError(f"payload could not be serialized: {exc}") from exc

    def decode(self, data: bytes) -> TokenPayload:
        if not data:
            raise PayloadDecodeError("payload is empty")
        try:
            text = bytes(data).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise PayloadDecodeError("payload is not valid UTF-8") from exc
        try:
            probe = _VersionProbe.model_validate_json(text)
        except ValidationError as exc:
            raise PayloadDecodeError(f"payload is malformed: {_summarize(exc)}") from exc
        if probe.version != self._version:
            raise UnsupportedSchemaVersionError(probe.version, self._version)
        try:
            envelope = PayloadEnvelope.model_validate_json(text)
        except ValidationError as exc:
            raise PayloadDecodeError(f"payload is malformed: {_summarize(exc)}") from exc
        return TokenPayload(
            principal=envelope.principal,
            claims=_from_nodes(envelope.claims),
            expires_at=envelope.expires_at,
        )


def _summarize(exc: ValidationError) -> str:
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ())) or "<root>"
    return f"{location}: {first.get('msg', 'invalid')}"


__all__ = [
    "MAX_CLAIM_DEPTH",
    "PAYLOAD_SCHEMA_VERSION",
    "PayloadCodec",
    "PayloadEnvelope",
]
