"""Callable registry: the trust policy deciding which names the bridge may invoke.

A name is callable only when it has a descriptor flagged ``exposed``. Descriptors come from
the allowlist (free functions, seeded with ``DEFAULT_CALLABLES``) and from registering a
class or instance, which records one ``Type::method`` descriptor per public method; those
are exposed only when the method carries the ``@bridge_exposed`` marker. Names are
case-insensitive. The allowlist is additive; registering a type again under the same
name replaces the methods recorded for it.
"""

from __future__ import annotations

import importlib
import inspect
from dataclasses import dataclass
from typing import Any, Callable, Iterable, TypeVar

from loguru import logger

from carryall.server.defaults import DEFAULT_CALLABLES
from carryall.utils.exceptions import LookupFault

F = TypeVar("F")

EXPOSED_MARKER = "__carryall_exposed__"
SCOPE_SEPARATOR = "::"


def bridge_exposed(func: F) -> F:
    """Mark a method as callable through the bridge as ``Type::method``."""
    target = func.__func__ if isinstance(func, (staticmethod, classmethod)) else func
    setattr(target, EXPOSED_MARKER, True)
    return func


def is_bridge_exposed(func: Any) -> bool:
    return getattr(func, EXPOSED_MARKER, False) is True


@dataclass(slots=True)
class CallableDescriptor:
    """Registry entry for one callable name."""

    name: str
    target: Callable[..., Any] | None
    exposed: bool


class CallableRegistry:
    """
    Registry of bridge callables.

    The registry is filled during startup and only read while requests are served.
    """

    def __init__(self, allowed: Iterable[str] | None = None, *, include_defaults: bool = True):
        self._descriptors: dict[str, CallableDescriptor] = {}
        self._types: dict[str, Any] = {}
        if include_defaults:
            for name, func in DEFAULT_CALLABLES.items():
                self.add_allowed_callable(name, func)
        for name in allowed or ():
            self.add_allowed_callable(name)

    def add_allowed_callable(self, name: Any, target: Callable[..., Any] | None = None) -> CallableRegistry:
        """Allow ``name``, optionally binding its implementation. Non-string names are ignored."""
        if not isinstance(name, str) or not name:
            return self
        key = name.lower()
        existing = self._descriptors.get(key)
        if target is None and existing is not None:
            target = existing.target
        self._descriptors[key] = CallableDescriptor(name=key, target=target, exposed=True)
        return self

    def register(self, target: Any, name: str | None = None) -> CallableRegistry:
        """
        Register a class or instance so its marked methods become ``Type::method`` callables.

        Args:
            target: Class (static and class methods are invoked on it) or instance (bound methods).
            name: Type name used on the wire. Defaults to the class name.

        Raises:
            ValueError: Two public methods differ only in case.
        """
        type_name = name or (target.__name__ if inspect.isclass(target) else type(target).__name__)
        members: dict[str, tuple[str, Callable[..., Any]]] = {}
        for attr in dir(target):
            if attr.startswith("_"):
                continue
            member = getattr(target, attr, None)
            if not callable(member):
                continue
            key = f"{type_name}{SCOPE_SEPARATOR}{attr}".lower()
            if key in members:
                raise ValueError(
                    f"Cannot register {type_name}: methods {members[key][0]!r} and {attr!r} differ only in case"
                )
            members[key] = (attr, member)

        # Methods of a previously registered type under this name lose their descriptors;
        # explicit allowlist entries (no bound target) are kept.
        prefix = f"{type_name}{SCOPE_SEPARATOR}".lower()
        for key in [k for k, d in self._descriptors.items() if k.startswith(prefix) and d.target is not None]:
            del self._descriptors[key]

        self._types[type_name.lower()] = target
        exposed_count = 0
        for key, (_, member) in members.items():
            existing = self._descriptors.get(key)
            exposed = is_bridge_exposed(member) or (existing is not None and existing.exposed)
            self._descriptors[key] = CallableDescriptor(name=key, target=member, exposed=exposed)
            exposed_count += int(exposed)
        logger.debug("Registered bridge type {} ({} exposed methods)", type_name, exposed_count)
        return self

    def load(self, import_path: str) -> CallableRegistry:
        """Register an object given as ``package.module:attr``: functions are allowed, anything else registered."""
        module_name, _, attr = import_path.partition(":")
        if not module_name or not attr:
            raise ValueError(f"Invalid callable import string {import_path!r}, expected 'module:attr'")
        obj: Any = importlib.import_module(module_name)
        for part in attr.split("."):
            obj = getattr(obj, part)
        if inspect.isfunction(obj) or inspect.isbuiltin(obj):
            return self.add_allowed_callable(obj.__name__, obj)
        return self.register(obj)

    def is_allowed(self, name: Any) -> bool:
        """Trust policy check; any unknown name, type or method is simply not allowed."""
        if not isinstance(name, str) or not name:
            return False
        descriptor = self._descriptors.get(name.lower())
        return descriptor is not None and descriptor.exposed

    def resolve(self, name: str) -> Callable[..., Any]:
        """Return the implementation bound to ``name``; raises ``LookupFault`` when there is none."""
        descriptor = self._descriptors.get(name.lower())
        if descriptor is not None and descriptor.target is not None:
            return descriptor.target
        target = self._resolve_scoped(name)
        if target is None:
            raise LookupFault(f'Callable "{name}" not found', name=name)
        return target

    def _resolve_scoped(self, name: str) -> Callable[..., Any] | None:
        parts = name.split(SCOPE_SEPARATOR)
        if len(parts) != 2:
            return None
        owner = self._types.get(parts[0].lower())
        if owner is None:
            return None
        wanted = parts[1].lower()
        for attr in dir(owner):
            if attr.lower() == wanted and not attr.startswith("_"):
                member = getattr(owner, attr, None)
                return member if callable(member) else None
        return None

    @property
    def allowed_callables(self) -> list[str]:
        """Sorted names that pass the trust policy."""
        return sorted(name for name, descriptor in self._descriptors.items() if descriptor.exposed)

    @property
    def exposed_descriptors(self) -> list[CallableDescriptor]:
        return [self._descriptors[name] for name in self.allowed_callables]

    def __contains__(self, name: object) -> bool:
        return self.is_allowed(name)

    def __len__(self) -> int:
        return len(self.allowed_callables)
