"""Storage for workflow definitions and instances.

The registry talks to storage only through :class:`WorkflowRepository`, so a
different backend can be injected without touching the registry.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager
from typing import Protocol

from .workflow import DefinitionIndex, WorkflowInstance


class WorkflowRepository(Protocol):
    """Protocol for workflow storage backends.

    Definitions are stored together with their precomputed index. Both
    ``add_*`` methods are atomic insert-if-absent operations.
    """

    def add_definition(self, index: DefinitionIndex) -> bool:
        """Store a definition unless its id is taken. Returns whether it was stored."""

    def has_definition(self, definition_id: str) -> bool:
        """Whether a definition with this id is stored."""

    def get_definition(self, definition_id: str) -> DefinitionIndex | None:
        """Retrieve a definition by id."""

    def list_definitions(self) -> list[DefinitionIndex]:
        """Return all definitions in insertion order."""

    def add_instance(self, instance: WorkflowInstance) -> bool:
        """Store a new instance unless its id is taken. Returns whether it was stored."""

    def get_instance(self, instance_id: str) -> WorkflowInstance | None:
        """Retrieve an instance by id."""

    def list_instances(self) -> list[WorkflowInstance]:
        """Return all instances in insertion order."""

    def save_instance(self, instance: WorkflowInstance) -> None:
        """Replace a stored instance. Call while holding its lock."""

    def lock_instance(self, instance_id: str) -> AbstractContextManager[None]:
        """Hold the lock that serializes read-modify-write of one instance."""


class DefinitionIds:
    """``in``-able view over a repository's definition ids."""

    def __init__(self, repository: WorkflowRepository) -> None:
        self._repository = repository

    def __contains__(self, definition_id: object) -> bool:
        return isinstance(definition_id, str) and self._repository.has_definition(definition_id)


class InMemoryWorkflowRepository(WorkflowRepository):
    """Keep definitions and instances in process memory.

    Data is lost when the process exits. Insertions take a short store-wide
    lock; instance mutation takes only that instance's own lock, so work on
    different instances never contends.
    """

    def __init__(self) -> None:
        self._definitions: dict[str, DefinitionIndex] = {}
        self._instances: dict[str, WorkflowInstance] = {}
        self._instance_locks: dict[str, threading.Lock] = {}
        self._definitions_lock = threading.Lock()
        self._instances_lock = threading.Lock()

    # ------------------------------------------------------------------
    def add_definition(self, index: DefinitionIndex) -> bool:
        with self._definitions_lock:
            if index.id in self._definitions:
                return False
            self._definitions[index.id] = index
            return True

    def has_definition(self, definition_id: str) -> bool:
        return definition_id in self._definitions

    def get_definition(self, definition_id: str) -> DefinitionIndex | None:
        return self._definitions.get(definition_id)

    def list_definitions(self) -> list[DefinitionIndex]:
        with self._definitions_lock:
            return list(self._definitions.values())

    # ------------------------------------------------------------------
    def add_instance(self, instance: WorkflowInstance) -> bool:
        with self._instances_lock:
            if instance.id in self._instances:
                return False
            self._instance_locks[instance.id] = threading.Lock()
            self._instances[instance.id] = instance
            return True

    def get_instance(self, instance_id: str) -> WorkflowInstance | None:
        return self._instances.get(instance_id)

    def list_instances(self) -> list[WorkflowInstance]:
        with self._instances_lock:
            return list(self._instances.values())

    def save_instance(self, instance: WorkflowInstance) -> None:
        if instance.id not in self._instances:
            raise KeyError(instance.id)
        self._instances[instance.id] = instance

    @contextmanager
    def lock_instance(self, instance_id: str) -> Iterator[None]:
        lock = self._instance_locks.get(instance_id)
        if lock is None:
            raise KeyError(instance_id)
        with lock:
            yield
