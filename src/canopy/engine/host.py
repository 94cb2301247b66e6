"""Host-supplied trees of discoverable test modules.

The engine only needs three things from a host node: its name, its
children, and, for test modules, the suite mapping it provides. PackageNode
adapts an importable Python package to that interface; test modules are
the submodules whose name ends with the configured suffix (``_test`` by
default) and expose either a module-level ``suite`` mapping or top-level
``test*`` functions plus any reserved suite keys.
"""

from __future__ import annotations

import importlib
import pkgutil
from collections.abc import Iterable, Mapping
from types import ModuleType
from typing import Any, Protocol, runtime_checkable

from canopy.engine.models import RESERVED_KEYS


@runtime_checkable
class HostNode(Protocol):
    @property
    def name(self) -> str: ...

    def children(self) -> Iterable[HostNode]: ...

    def load(self) -> Any: ...


def is_node(value: object) -> bool:
    """True for values the tree walker descends into rather than runs."""
    return isinstance(value, Mapping) or isinstance(value, HostNode)


class PackageNode:
    """A module or package, discovered through pkgutil rather than globbing."""

    def __init__(self, module_name: str, *, is_package: bool | None = None) -> None:
        self.module_name = module_name
        self._is_package = is_package

    @classmethod
    def from_module(cls, module: ModuleType) -> PackageNode:
        return cls(module.__name__, is_package=hasattr(module, "__path__"))

    @property
    def name(self) -> str:
        return self.module_name.rpartition(".")[2]

    @property
    def is_package(self) -> bool:
        if self._is_package is None:
            self._is_package = hasattr(self._import(), "__path__")
        return self._is_package

    def _import(self) -> ModuleType:
        return importlib.import_module(self.module_name)

    def children(self) -> list[PackageNode]:
        if not self.is_package:
            return []
        module = self._import()
        infos = pkgutil.iter_modules(module.__path__, prefix=f"{module.__name__}.")
        return sorted(
            (PackageNode(info.name, is_package=info.ispkg) for info in infos),
            key=lambda node: node.module_name,
        )

    def load(self) -> Any:
        module = self._import()
        suite = getattr(module, "suite", None)
        if suite is not None:
            return suite
        return {
            key: value
            for key, value in vars(module).items()
            if key in RESERVED_KEYS or (key.startswith("test") and callable(value))
        }

    def __repr__(self) -> str:
        return f"PackageNode({self.module_name!r})"
