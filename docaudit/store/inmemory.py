"""In-memory document store for testing and development.

Models the parts of a document store the audit layer depends on:
connections exposing a database, raw collections accepting inserts,
and models (entity types) whose ``save``/``remove`` run lifecycle hooks.
Set-based operations (``update_many``, ``delete_many``) and
``find_one_and_delete`` bypass the hooks, like their driver counterparts.

Filters support equality on (dotted) field paths. Updates support the
``$set``, ``$unset`` and ``$inc`` operators.
"""

import copy
import itertools
from collections.abc import Mapping
from typing import Any, Generic, TypeVar

from docaudit.observability.logging import get_logger
from docaudit.store.document import Document
from docaudit.store.protocols import LifecycleHook

logger = get_logger(__name__)

DocumentT = TypeVar("DocumentT", bound=Document)

_MISSING = object()


class DuplicateKeyError(Exception):
    """Raised when inserting a document whose id already exists."""


def get_path(data: Mapping[str, Any], path: str) -> Any:
    """Read a dotted path, returning a private sentinel when absent."""
    current: Any = data
    for part in path.split("."):
        if not isinstance(current, Mapping) or part not in current:
            return _MISSING
        current = current[part]
    return current


def matches(data: Mapping[str, Any], selector: Mapping[str, Any]) -> bool:
    """True if every selector path equals the value stored in ``data``."""
    for path, expected in selector.items():
        value = get_path(data, path)
        if value is _MISSING or value != expected:
            return False
    return True


def apply_update(data: dict[str, Any], update: Mapping[str, Any]) -> None:
    """Apply a ``$set``/``$unset``/``$inc`` update document in place."""
    for operator, fields in update.items():
        if operator == "$set":
            for path, value in fields.items():
                _set_path(data, path, copy.deepcopy(value))
        elif operator == "$unset":
            for path in fields:
                parent, leaf = _parent_of(data, path, create=False)
                if parent is not None:
                    parent.pop(leaf, None)
        elif operator == "$inc":
            for path, amount in fields.items():
                current = get_path(data, path)
                _set_path(data, path, (0 if current is _MISSING else current) + amount)
        else:
            raise ValueError(f"Unsupported update operator: {operator}")


def _set_path(data: dict[str, Any], path: str, value: Any) -> None:
    parent, leaf = _parent_of(data, path, create=True)
    assert parent is not None
    parent[leaf] = value


def _parent_of(
    data: dict[str, Any], path: str, *, create: bool
) -> tuple[dict[str, Any] | None, str]:
    *parents, leaf = path.split(".")
    current = data
    for part in parents:
        child = current.get(part)
        if not isinstance(child, dict):
            if not create:
                return None, leaf
            child = current[part] = {}
        current = child
    return current, leaf


class InMemoryCollection:
    """Raw collection of plain documents, keyed by ``id``.

    Satisfies the AuditCollection protocol, so it also serves as the audit
    destination of an InMemoryDatabase.
    """

    def __init__(self, name: str) -> None:
        self._name = name
        self._documents: dict[Any, dict[str, Any]] = {}
        self._ids = itertools.count(1)

    @property
    def name(self) -> str:
        return self._name

    async def insert(self, record: Mapping[str, Any]) -> Any:
        """Insert a copy of ``record``, assigning an id when absent."""
        stored = copy.deepcopy(dict(record))
        stored.setdefault("id", f"{self._name}-{next(self._ids)}")
        if stored["id"] in self._documents:
            raise DuplicateKeyError(f"Duplicate id {stored['id']!r} in {self._name}")
        self._documents[stored["id"]] = stored
        return stored["id"]

    async def replace(self, document_id: Any, document: Mapping[str, Any]) -> bool:
        if document_id not in self._documents:
            return False
        self._documents[document_id] = copy.deepcopy(dict(document))
        return True

    async def delete(self, document_id: Any) -> bool:
        return self._documents.pop(document_id, None) is not None

    async def find(self, selector: Mapping[str, Any] | None = None) -> list[dict[str, Any]]:
        """Return copies of all documents matching ``selector``, in insert order."""
        selector = selector or {}
        return [
            copy.deepcopy(document)
            for document in self._documents.values()
            if matches(document, selector)
        ]

    async def find_one(self, selector: Mapping[str, Any] | None = None) -> dict[str, Any] | None:
        found = await self.find(selector)
        return found[0] if found else None

    async def count(self, selector: Mapping[str, Any] | None = None) -> int:
        return len(await self.find(selector))

    async def update_many(self, selector: Mapping[str, Any], update: Mapping[str, Any]) -> int:
        updated = 0
        for document in self._documents.values():
            if matches(document, selector):
                apply_update(document, update)
                updated += 1
        return updated

    async def delete_many(self, selector: Mapping[str, Any]) -> int:
        doomed = [key for key, doc in self._documents.items() if matches(doc, selector)]
        for key in doomed:
            del self._documents[key]
        return len(doomed)


class InMemoryDatabase:
    """Named set of raw collections."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._collections: dict[str, InMemoryCollection] = {}

    def collection(self, name: str) -> InMemoryCollection:
        if name not in self._collections:
            self._collections[name] = InMemoryCollection(name)
        return self._collections[name]


class InMemoryConnection:
    """A connection owning one database and the models defined on it."""

    def __init__(self, database_name: str = "test") -> None:
        self._database = InMemoryDatabase(database_name)
        self._models: dict[str, InMemoryModel[Any]] = {}

    @property
    def database(self) -> InMemoryDatabase:
        return self._database

    async def get_database(self) -> InMemoryDatabase:
        return self._database

    def model(
        self,
        document_type: type[DocumentT],
        collection_name: str | None = None,
    ) -> "InMemoryModel[DocumentT]":
        """Define (or fetch) the model storing ``document_type``.

        The collection name defaults to the lowercased class name plus "s",
        e.g. ``AuditTest`` is stored in ``audittests``.
        """
        name = collection_name or f"{document_type.__name__.lower()}s"
        if name not in self._models:
            self._models[name] = InMemoryModel(document_type, name, self)
        return self._models[name]


class InMemoryModel(Generic[DocumentT]):
    """An entity type: a document class bound to a collection and connection.

    ``save`` and ``remove`` run the registered lifecycle hooks first. A hook
    aborts the operation by raising; nothing is written in that case.
    """

    def __init__(
        self,
        document_type: type[DocumentT],
        name: str,
        connection: InMemoryConnection,
    ) -> None:
        self.document_type = document_type
        self._name = name
        self._connection = connection
        self._persist_hooks: list[LifecycleHook] = []
        self._remove_hooks: list[LifecycleHook] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def connection(self) -> InMemoryConnection:
        return self._connection

    @property
    def collection(self) -> InMemoryCollection:
        return self._connection.database.collection(self._name)

    def before_persist(self, hook: LifecycleHook) -> None:
        self._persist_hooks.append(hook)

    def before_remove(self, hook: LifecycleHook) -> None:
        self._remove_hooks.append(hook)

    def new(self, **fields: Any) -> DocumentT:
        """Create an unsaved document bound to this model."""
        document = self.document_type(**fields)
        document.bind(self)
        return document

    async def save(self, document: DocumentT) -> DocumentT:
        document.bind(self)
        for hook in self._persist_hooks:
            await hook(document)

        if document.is_new:
            await self.collection.insert(document.to_plain())
        elif not await self.collection.replace(document.id, document.to_plain()):
            raise LookupError(f"Document {document.id!r} no longer exists in {self._name}")
        document.mark_persisted()
        logger.debug("document_saved", collection=self._name, document_id=document.id)
        return document

    async def remove(self, document: DocumentT) -> None:
        document.bind(self)
        for hook in self._remove_hooks:
            await hook(document)
        await self.collection.delete(document.id)
        logger.debug("document_removed", collection=self._name, document_id=document.id)

    async def find(self, selector: Mapping[str, Any] | None = None) -> list[DocumentT]:
        return [self._load(data) for data in await self.collection.find(selector)]

    async def find_one(self, selector: Mapping[str, Any] | None = None) -> DocumentT | None:
        data = await self.collection.find_one(selector)
        return self._load(data) if data is not None else None

    async def find_one_and_delete(self, selector: Mapping[str, Any]) -> DocumentT | None:
        """Delete the first match without running remove hooks."""
        data = await self.collection.find_one(selector)
        if data is None:
            return None
        await self.collection.delete(data["id"])
        return self._load(data)

    async def update_many(self, selector: Mapping[str, Any], update: Mapping[str, Any]) -> int:
        """Set-based update; no documents are loaded and no hooks run."""
        return await self.collection.update_many(selector, update)

    async def delete_many(self, selector: Mapping[str, Any]) -> int:
        """Set-based delete; no documents are loaded and no hooks run."""
        return await self.collection.delete_many(selector)

    def _load(self, data: Mapping[str, Any]) -> DocumentT:
        document = self.document_type.model_validate(data)
        document.bind(self)
        document.mark_persisted()
        return document
