"""
Shared building blocks for wire models.

Every entity returned by the payments API is an immutable snapshot, so all
models here are frozen. Two wire conventions need help from pydantic:

  - Single-variant tagged unions still carry their ``type`` tag and must
    reject payloads that omit it.
  - Some containers (a payment, every flow-step response) merge the fields
    of their ``status`` variant into the same JSON object instead of
    nesting them.
"""

from typing import Any, get_args

from pydantic import BaseModel, BeforeValidator, model_serializer, model_validator


class WireModel(BaseModel):
    """Base class for all immutable wire snapshots."""

    model_config = {"frozen": True}


def require_tag(tag_field: str) -> BeforeValidator:
    """Reject raw payloads missing the ``tag_field`` discriminator."""

    def _check(value: Any) -> Any:
        if isinstance(value, dict) and tag_field not in value:
            raise ValueError(f"missing '{tag_field}' discriminator")
        return value

    return BeforeValidator(_check)


class FlattenedStatusModel(WireModel):
    """
    A model whose ``status`` union is flattened into the parent object.

    On decode, the keys belonging to the status variants are lifted out of
    the payload and nested under ``status``. On encode, they are merged back.
    """

    @classmethod
    def _status_keys(cls) -> frozenset[str]:
        keys: set[str] = set()
        for variant in get_args(cls.model_fields["status"].annotation):
            keys.update(variant.model_fields)
        keys.discard("status")
        return frozenset(keys - set(cls.model_fields))

    @model_validator(mode="before")
    @classmethod
    def _nest_status(cls, data: Any) -> Any:
        if isinstance(data, dict) and isinstance(data.get("status"), str):
            data = dict(data)
            status = {"status": data["status"]}
            for key in cls._status_keys():
                if key in data:
                    status[key] = data.pop(key)
            data["status"] = status
        return data

    @model_serializer(mode="wrap")
    def _flatten_status(self, handler):
        data = handler(self)
        status = data.pop("status", None)
        if isinstance(status, dict):
            data.update(status)
        return data
