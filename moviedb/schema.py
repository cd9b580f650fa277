"""A small schema algebra and the generic routine that interprets it.

Schemas are plain data: :class:`Primitive`, :class:`Nullable`, :class:`ArrayOf`
and :class:`ObjectOf`.  :func:`validate` walks a raw JSON value alongside a
schema and either returns the typed value or raises
:class:`~moviedb.errors.SchemaMismatch` describing the first offending path.

Validation is exact for declared fields and forward compatible for everything
else: unknown keys are ignored, missing or wrong-typed keys fail, and only
:class:`Nullable` fields may hold ``null``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Mapping, Union

from pydantic import BaseModel, ValidationError

from .errors import PathPart, SchemaMismatch

PrimitiveKind = Literal["string", "number", "integer", "boolean"]


@dataclass(frozen=True, slots=True)
class Primitive:
    kind: PrimitiveKind


@dataclass(frozen=True, slots=True)
class Nullable:
    inner: "Schema"


@dataclass(frozen=True, slots=True)
class ArrayOf:
    element: "Schema"


@dataclass(frozen=True, slots=True, eq=False)
class ObjectOf:
    """An object with a fixed set of required fields.

    When ``model`` is set, the validated fields are turned into an instance of
    that pydantic model.
    """

    fields: Mapping[str, "Schema"]
    model: type[BaseModel] | None = field(default=None)

    def extend(
        self,
        extra: Mapping[str, "Schema"] | None = None,
        *,
        omit: tuple[str, ...] = (),
        model: type[BaseModel] | None = None,
    ) -> "ObjectOf":
        """Return a copy without ``omit`` and with ``extra`` fields added."""

        merged = {name: schema for name, schema in self.fields.items() if name not in omit}
        merged.update(extra or {})
        return ObjectOf(merged, model=model if model is not None else self.model)


Schema = Union[Primitive, Nullable, ArrayOf, ObjectOf]

STRING = Primitive("string")
NUMBER = Primitive("number")
INTEGER = Primitive("integer")
BOOLEAN = Primitive("boolean")


def nullable(inner: Schema) -> Nullable:
    return Nullable(inner)


def array_of(element: Schema) -> ArrayOf:
    return ArrayOf(element)


def object_of(
    fields: Mapping[str, Schema], *, model: type[BaseModel] | None = None
) -> ObjectOf:
    return ObjectOf(dict(fields), model=model)


def kind_of(value: Any) -> str:
    """Return the JSON kind of ``value`` as reported in mismatches."""

    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def describe(schema: Schema) -> str:
    """Return a short human readable description of ``schema``."""

    if isinstance(schema, Primitive):
        return schema.kind
    if isinstance(schema, Nullable):
        return f"{describe(schema.inner)} | null"
    if isinstance(schema, ArrayOf):
        return f"array of {describe(schema.element)}"
    return "object"


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_integer(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and value.is_integer()


_PRIMITIVE_CHECKS = {
    "string": lambda value: isinstance(value, str),
    "number": is_number,
    "integer": is_integer,
    "boolean": lambda value: isinstance(value, bool),
}


def validate(schema: Schema, value: Any, path: tuple[PathPart, ...] = ()) -> Any:
    """Validate ``value`` against ``schema`` and return the typed result."""

    if isinstance(schema, Primitive):
        if not _PRIMITIVE_CHECKS[schema.kind](value):
            raise SchemaMismatch(path, describe(schema), kind_of(value))
        if schema.kind == "integer":
            return int(value)
        return value

    if isinstance(schema, Nullable):
        if value is None:
            return None
        try:
            return validate(schema.inner, value, path)
        except SchemaMismatch as exc:
            if exc.path == path:
                # Report the nullable kind for the field itself, not its inner one.
                raise SchemaMismatch(path, describe(schema), exc.received) from None
            raise

    if isinstance(schema, ArrayOf):
        if not isinstance(value, list):
            raise SchemaMismatch(path, describe(schema), kind_of(value))
        return [
            validate(schema.element, element, (*path, index))
            for index, element in enumerate(value)
        ]

    if not isinstance(value, dict):
        raise SchemaMismatch(path, describe(schema), kind_of(value))

    result: dict[str, Any] = {}
    for name, field_schema in schema.fields.items():
        if name not in value:
            raise SchemaMismatch((*path, name), describe(field_schema), "missing")
        result[name] = validate(field_schema, value[name], (*path, name))
    if schema.model is None:
        return result
    return build_model(schema.model, result, path)


def is_valid(schema: Schema, value: Any) -> bool:
    try:
        validate(schema, value)
    except SchemaMismatch:
        return False
    return True


def conforming_fields(schema: ObjectOf, value: Mapping[str, Any]) -> dict[str, Any]:
    """Return only the declared fields of ``value`` that validate on their own.

    Used by lenient decoders: fields that are absent or malformed are left out
    so the model defaults apply.
    """

    kept: dict[str, Any] = {}
    for name, field_schema in schema.fields.items():
        if name not in value:
            continue
        try:
            kept[name] = validate(field_schema, value[name], (name,))
        except SchemaMismatch:
            continue
    return kept


def build_model(
    model: type[BaseModel], data: Mapping[str, Any], path: tuple[PathPart, ...] = ()
) -> BaseModel:
    """Instantiate ``model`` and report constraint failures as mismatches."""

    try:
        return model.model_validate(data)
    except ValidationError as exc:
        error = exc.errors()[0]
        location = tuple(part for part in error.get("loc", ()) if isinstance(part, (str, int)))
        raise SchemaMismatch(
            (*path, *location), error.get("msg", "valid value"), kind_of(error.get("input"))
        ) from exc
