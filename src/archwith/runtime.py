# Copyright 2026 archwith Contributors
# SPDX-License-Identifier: Apache-2.0

"""Runtime support imported by generated adapter modules.

The archive library itself is external. Generated code only relies on the
converter contract below: every converter exposes ``serialize_with``,
``resolve_with`` and ``deserialize_with`` and, for annotations, an
``Archived`` attribute. Values are archived in two phases: ``serialize_with``
writes dependent data and returns a resolver token, then ``resolve_with``
builds the archived representation at a position using that token.
"""

from __future__ import annotations

import typing
from typing import Any, Callable, ClassVar, Generic, Protocol, TypeVar

T = TypeVar("T")

# ###############
# Public Interface
# ###############


class Archived(Generic[T]):
    """Annotation marker for the archived representation of ``T``."""


class Converter(Protocol):
    """What generated code requires from a converter.

    A field whose own mirror type is its converter also passes ``into=``, the
    remote type to rebuild; :class:`MirrorAdapter` accepts it.
    """

    def serialize_with(self, value: Any, serializer: Any) -> Any: ...

    def resolve_with(self, value: Any, pos: int, resolver: Any) -> Any: ...

    def deserialize_with(self, archived: Any, deserializer: Any) -> Any: ...


class Identity:
    """Pass-through converter: the value archives itself.

    Values that implement ``serialize``/``resolve`` (and archived values that
    implement ``deserialize``) are delegated to; anything else is stored as is.
    """

    @staticmethod
    def serialize_with(value: Any, serializer: Any) -> Any:
        serialize = getattr(value, "serialize", None)
        return serialize(serializer) if serialize is not None else None

    @staticmethod
    def resolve_with(value: Any, pos: int, resolver: Any) -> Any:
        resolve = getattr(value, "resolve", None)
        return resolve(pos, resolver) if resolve is not None else value

    @staticmethod
    def deserialize_with(archived: Any, deserializer: Any) -> Any:
        deserialize = getattr(archived, "deserialize", None)
        return deserialize(deserializer) if deserialize is not None else archived


class With(Generic[T]):
    """A value paired with the converter that archives it.

    Used for converter chains: in ``via(A, B)`` the outer converter ``A``
    receives ``With(value, B)``.
    """

    __slots__ = ("value", "converter")

    def __init__(self, value: T, converter: Any) -> None:
        self.value = value
        self.converter = converter

    def serialize(self, serializer: Any) -> Any:
        return self.converter.serialize_with(self.value, serializer)

    def resolve(self, pos: int, resolver: Any) -> ArchivedWith:
        return ArchivedWith(self.converter.resolve_with(self.value, pos, resolver), self.converter)

    def into_inner(self) -> T:
        return self.value

    def __repr__(self) -> str:
        return f"With({self.value!r}, {getattr(self.converter, '__qualname__', self.converter)!r})"


class ArchivedWith:
    """The archived form of a :class:`With`; restores to a ``With`` of the same converter."""

    __slots__ = ("archived", "converter")

    def __init__(self, archived: Any, converter: Any) -> None:
        self.archived = archived
        self.converter = converter

    def deserialize(self, deserializer: Any) -> With[Any]:
        return With(self.converter.deserialize_with(self.archived, deserializer), self.converter)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ArchivedWith):
            return NotImplemented
        return self.archived == other.archived and self.converter is other.converter

    def __hash__(self) -> int:
        return hash((self.archived, id(self.converter)))


class MirrorAdapter:
    """Base class of every generated mirror type.

    A mirror type is itself a converter for each remote type it stands in
    for. Generated modules register one unit per remote type; calls are
    dispatched on the type of the value being archived.
    """

    Archived: ClassVar[type]
    Resolver: ClassVar[type]
    _units: ClassVar[dict[type, Any]]
    _variant_units: ClassVar[dict[type, Any]]
    _deserializers: ClassVar[dict[type, Callable[[Any, Any], Any]]]

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        cls._units = {}
        cls._variant_units = {}
        cls._deserializers = {}

    @classmethod
    def register(cls, remote: Any, unit: Any, variants: tuple[type, ...] = ()) -> None:
        """Register the archive/serialize unit for *remote*.

        Values of the variant classes of *remote* are dispatched to the same
        unit, whether or not the variant classes derive from *remote*.
        """
        cls._units[_dispatch_key(remote)] = unit
        for variant in variants:
            cls._variant_units[variant] = unit

    @classmethod
    def register_deserializer(cls, remote: Any, function: Callable[[Any, Any], Any]) -> None:
        """Register how to rebuild *remote* from the archived representation."""
        cls._deserializers[_dispatch_key(remote)] = function

    @classmethod
    def remote_types(cls) -> list[type]:
        """Return the registered remote types in registration order."""
        return list(cls._units)

    @classmethod
    def unit_for(cls, value: Any) -> Any:
        """Return the unit registered for the type of *value* or its nearest base class."""
        for klass in type(value).__mro__:
            unit = cls._units.get(klass, cls._variant_units.get(klass))
            if unit is not None:
                return unit
        raise TypeError(f"{cls.__name__} does not stand in for {type(value).__qualname__}")

    @classmethod
    def serialize_with(cls, value: Any, serializer: Any) -> Any:
        return cls.unit_for(value).serialize_with(value, serializer)

    @classmethod
    def resolve_with(cls, value: Any, pos: int, resolver: Any) -> Any:
        return cls.unit_for(value).resolve_with(value, pos, resolver)

    @classmethod
    def deserialize_with(cls, archived: Any, deserializer: Any, into: Any = None) -> Any:
        """Rebuild a remote instance from *archived*.

        Args:
            archived: The archived representation.
            deserializer: Context object handed through to field converters.
            into: Remote type to build; defaults to the first one registered.

        Raises:
            NotImplementedError: If no deserializer was generated or registered.
            TypeError: If *into* is not a registered remote type.
        """
        if not cls._deserializers:
            raise NotImplementedError(
                f"{cls.__name__} has no deserializer; register one with {cls.__name__}.register_deserializer()"
            )
        if into is None:
            function = next(iter(cls._deserializers.values()))
        else:
            function = cls._deserializers.get(_dispatch_key(into))
            if function is None:
                raise TypeError(f"{cls.__name__} cannot deserialize into {into!r}")
        return function(archived, deserializer)


def archive(value: Any, converter: Any, serializer: Any, pos: int = 0) -> Any:
    """Run both archiving phases for *value*: serialize first, then resolve with the returned token."""
    resolver = converter.serialize_with(value, serializer)
    return converter.resolve_with(value, pos, resolver)


def restore(archived: Any, converter: Any, deserializer: Any) -> Any:
    """Rebuild a value from *archived* through *converter*."""
    return converter.deserialize_with(archived, deserializer)


# ################
# Implementation
# ################


def _dispatch_key(remote: Any) -> Any:
    """Strip subscripts so ``Remote[int]`` and ``Remote`` share one registration."""
    return typing.get_origin(remote) or remote
