# Copyright 2026 archwith Contributors
# SPDX-License-Identifier: Apache-2.0

"""References to Python types and functions named in directives."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic import Field as _Field

# ###############
# Public Interface
# ###############


class TypePath(BaseModel):
    """A reference to a type, converter, or function.

    ``module`` is the importable module that defines the object, ``qualname``
    the dotted path inside that module. A path without a module is a builtin
    or a name defined by the generated module itself.

    Attributes:
        module: Dotted module name to import, or None for bare names.
        qualname: Dotted attribute path inside the module.
        args: Subscript arguments, e.g. ``int`` in ``typing.Optional[int]``.
        explicit_module: True if the module was split off with ``:``.
    """

    model_config = ConfigDict(frozen=True)

    module: str | None = None
    qualname: str
    args: tuple[TypePath, ...] = _Field(default_factory=tuple)
    explicit_module: bool = False

    def reference(self) -> str:
        """Return the Python expression that evaluates to this object."""
        base = f"{self.module}.{self.qualname}" if self.module else self.qualname
        if not self.args:
            return base
        return f"{base}[{', '.join(arg.reference() for arg in self.args)}]"

    def modules(self) -> set[str]:
        """Return every module that must be imported to evaluate :meth:`reference`."""
        found: set[str] = {self.module} if self.module else set()
        for arg in self.args:
            found |= arg.modules()
        return found

    def base_name(self) -> str:
        """Return the last segment of the qualified name (``Remote`` for ``pkg.Remote[int]``)."""
        return self.qualname.rsplit(".", 1)[-1]

    def identifier(self) -> str:
        """Return a Python identifier derived from the reference text."""
        chars = [ch if ch.isalnum() else "_" for ch in self.reference()]
        return "_".join(part for part in "".join(chars).split("_") if part)

    def __str__(self) -> str:
        base = self.qualname
        if self.module:
            sep = ":" if self.explicit_module else "."
            base = f"{self.module}{sep}{self.qualname}"
        if not self.args:
            return base
        return f"{base}[{', '.join(str(arg) for arg in self.args)}]"


def type_path(dotted: str, *args: TypePath) -> TypePath:
    """Build a TypePath from dotted text without going through the directive parser.

    ``pkg.mod.Name`` splits at the last dot; ``pkg.mod:Outer.Inner`` splits
    at the colon.
    """
    if ":" in dotted:
        module, qualname = dotted.split(":", 1)
        return TypePath(module=module, qualname=qualname, args=args, explicit_module=True)
    if "." in dotted:
        module, qualname = dotted.rsplit(".", 1)
        return TypePath(module=module, qualname=qualname, args=args)
    return TypePath(qualname=dotted, args=args)


# Resolve the self-reference in ``args``.
TypePath.model_rebuild()
