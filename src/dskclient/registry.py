"""Registry of element transforms used by the document transformer."""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any, Callable, Iterator, Mapping

from dskclient.exceptions import TransformFallbackUsed

logger = logging.getLogger(__name__)

# (props, children, context) -> render node
RenderFunction = Callable[[dict[str, str], list[Any], Any], Any]


class TransformRegistry:
    """Maps element types to render functions.

    Types are case-insensitive: the markup parser lowercases tag names,
    so ``ColorCard`` and ``colorcard`` name the same transform.
    Registering a type twice replaces the earlier render function.
    """

    def __init__(self, transforms: Mapping[str, RenderFunction] | None = None) -> None:
        self._transforms: dict[str, RenderFunction] = {}
        for type_, render in (transforms or {}).items():
            self.register(type_, render)

    def register(self, type_: str, render: RenderFunction) -> None:
        key = type_.lower()
        if key in self._transforms:
            logger.debug("Replacing transform for %s", key)
        self._transforms[key] = render

    def transform(self, type_: str) -> Callable[[RenderFunction], RenderFunction]:
        """Decorator form of ``register``."""

        def decorator(render: RenderFunction) -> RenderFunction:
            self.register(type_, render)
            return render

        return decorator

    def get(self, type_: str) -> RenderFunction | None:
        return self._transforms.get(type_.lower())

    def resolve(self, type_: str) -> RenderFunction:
        """Return the render function for a type.

        Raises:
            TransformFallbackUsed: If no transform is registered for the type.
        """
        try:
            return self._transforms[type_.lower()]
        except KeyError:
            raise TransformFallbackUsed(type_.lower()) from None

    def types(self) -> list[str]:
        """List the registered (lowercased) types in registration order."""
        return list(self._transforms)

    def freeze(self) -> TransformRegistry:
        """Return an immutable snapshot of this registry."""
        return FrozenTransformRegistry(self._transforms)

    def __contains__(self, type_: object) -> bool:
        return isinstance(type_, str) and type_.lower() in self._transforms

    def __iter__(self) -> Iterator[str]:
        return iter(self._transforms)

    def __len__(self) -> int:
        return len(self._transforms)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({', '.join(self._transforms)})"


class FrozenTransformRegistry(TransformRegistry):
    """A registry that cannot be changed after creation."""

    def __init__(self, transforms: Mapping[str, RenderFunction] | None = None) -> None:
        super().__init__(transforms)
        self._transforms = MappingProxyType(dict(self._transforms))  # type: ignore[assignment]

    def register(self, type_: str, render: RenderFunction) -> None:
        if isinstance(self._transforms, MappingProxyType):
            raise TypeError("Cannot register transforms on a frozen registry")
        super().register(type_, render)

    def freeze(self) -> TransformRegistry:
        return self
