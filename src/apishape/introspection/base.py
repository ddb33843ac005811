"""Runtime introspection capability interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from apishape.core.errors import NotFoundError
from apishape.core.models import ClassDeclaration, FunctionDeclaration


class EntityIntrospector(ABC):
    """Obtains declarations for already-loaded program entities.

    Which entities count as loaded is decided by the host (and the caller
    that configured it), never discovered by apishape itself.
    """

    @abstractmethod
    def is_loaded(self, name: str) -> bool:
        """Whether ``name`` names a loaded class-like entity."""

    @abstractmethod
    def introspect_entity(self, name: str) -> ClassDeclaration:
        """Build a class declaration from reflection data.

        Raises:
            NotFoundError: If the entity is not loaded.
        """

    @abstractmethod
    def introspect_function(self, name: str) -> FunctionDeclaration:
        """Build a function declaration from reflection data.

        Raises:
            NotFoundError: If the function is not loaded.
        """

    @abstractmethod
    def source_file(self, name: str) -> Path | None:
        """Source file that declares ``name``, when the host knows it."""

    @abstractmethod
    def clear_cache(self) -> None:
        """Drop all cached declarations."""


class NullIntrospector(EntityIntrospector):
    """Host without reflection: nothing is ever loaded."""

    def is_loaded(self, name: str) -> bool:
        return False

    def introspect_entity(self, name: str) -> ClassDeclaration:
        raise NotFoundError(f"Entity not loaded: {name}")

    def introspect_function(self, name: str) -> FunctionDeclaration:
        raise NotFoundError(f"Function not loaded: {name}")

    def source_file(self, name: str) -> Path | None:
        return None

    def clear_cache(self) -> None:
        return None
