"""Testing utilities: in-memory Motor stubs and a scripted RAWG client."""

from __future__ import annotations

import re
from copy import deepcopy
from functools import cmp_to_key
from typing import Any, Dict, Iterable, List

from pymongo.errors import DuplicateKeyError


class StubCursor:
    """Minimal cursor wrapper to simulate Motor's async cursor."""

    def __init__(self, documents: list[dict[str, Any]]) -> None:
        self._documents = documents
        self._limit: int | None = None

    def limit(self, value: int) -> "StubCursor":
        self._limit = value
        return self

    def sort(
        self,
        key_or_list: Any,
        direction: int | str | None = None,
    ) -> "StubCursor":
        if isinstance(key_or_list, list):
            specs = [
                (field, -1 if order in (-1, "desc", "descending") else 1)
                for field, order in key_or_list
            ]
        else:
            order = direction
            if isinstance(order, str):
                order = -1 if order.lower().startswith("desc") else 1
            if order is None:
                order = 1
            specs = [(key_or_list, -1 if order in (-1, "desc", "descending") else 1)]

        def comparator(left: dict[str, Any], right: dict[str, Any]) -> int:
            for field, order in specs:
                left_value = left.get(field)
                right_value = right.get(field)
                if left_value == right_value:
                    continue
                if left_value is None:
                    return 1
                if right_value is None:
                    return -1
                if left_value < right_value:
                    return -order
                if left_value > right_value:
                    return order
            return 0

        self._documents = sorted(self._documents, key=cmp_to_key(comparator))
        return self

    async def to_list(self, length: int | None = None) -> list[dict[str, Any]]:
        documents = deepcopy(self._documents)
        effective_length = length
        if self._limit is not None:
            effective_length = self._limit if effective_length is None else min(self._limit, effective_length)
        if effective_length is None:
            return documents
        return documents[:effective_length]


class StubCollection:
    """In-memory Motor-like collection used for API tests.

    ``unique_fields`` mimics unique indexes by raising ``DuplicateKeyError``.
    """

    def __init__(self, unique_fields: Iterable[str] = ()) -> None:
        self.documents: list[dict[str, Any]] = []
        self.created_indexes: list[dict[str, Any]] = []
        self.unique_fields = tuple(unique_fields)
        self._next_object_id = 0

    def _matches(self, document: dict[str, Any], filter_: dict[str, Any]) -> bool:
        for key, value in filter_.items():
            if key == "$or":
                if not any(self._matches(document, clause) for clause in value):
                    return False
            elif key == "$and":
                if not all(self._matches(document, clause) for clause in value):
                    return False
            else:
                candidate = document.get(key)
                if isinstance(value, dict):
                    if "$regex" in value:
                        options = value.get("$options", "")
                        flags = re.IGNORECASE if "i" in options.lower() else 0
                        compiled = re.compile(value["$regex"], flags)
                        if not isinstance(candidate, str) or compiled.search(candidate) is None:
                            return False
                    elif "$in" in value:
                        if candidate not in list(value["$in"]):
                            return False
                    elif candidate != value:
                        return False
                elif isinstance(candidate, list) and not isinstance(value, list):
                    # Mongo equality on an array field matches any element.
                    if value not in candidate:
                        return False
                elif candidate != value:
                    return False
        return True

    def _check_unique(self, document: dict[str, Any]) -> None:
        for field in self.unique_fields:
            if field not in document:
                continue
            for existing in self.documents:
                if existing.get(field) == document[field]:
                    raise DuplicateKeyError(f"E11000 duplicate key error on '{field}'")

    def _assign_object_id(self, document: dict[str, Any]) -> dict[str, Any]:
        self._next_object_id += 1
        document.setdefault("_id", f"oid-{self._next_object_id}")
        return document

    async def insert_one(self, document: dict[str, Any]):
        new_document = self._assign_object_id(deepcopy(document))
        self._check_unique(new_document)
        self.documents.append(new_document)
        return type("InsertOneResult", (), {"inserted_id": new_document["_id"]})()

    async def update_one(
        self,
        filter_: dict[str, Any],
        update: dict[str, Any],
        *,
        upsert: bool = False,
        **_: Any,
    ):
        match = None
        for document in self.documents:
            if self._matches(document, filter_):
                match = document
                break

        if match is not None:
            match.update(deepcopy(update.get("$set", {})))
            for key in update.get("$unset", {}):
                match.pop(key, None)
            return type("UpdateResult", (), {"matched_count": 1, "upserted_id": None})()

        if upsert:
            new_document = {
                key: value
                for key, value in filter_.items()
                if not key.startswith("$") and not isinstance(value, dict)
            }
            new_document.update(deepcopy(update.get("$setOnInsert", {})))
            new_document.update(deepcopy(update.get("$set", {})))
            self._assign_object_id(new_document)
            self._check_unique(new_document)
            self.documents.append(new_document)
            return type("UpdateResult", (), {"matched_count": 0, "upserted_id": new_document["_id"]})()

        return type("UpdateResult", (), {"matched_count": 0, "upserted_id": None})()

    async def find_one(self, filter_: dict[str, Any]) -> dict[str, Any] | None:
        for document in self.documents:
            if self._matches(document, filter_):
                return deepcopy(document)
        return None

    def find(self, filter_: dict[str, Any] | None = None) -> StubCursor:
        filter_ = filter_ or {}
        results = [deepcopy(document) for document in self.documents if self._matches(document, filter_)]
        return StubCursor(results)

    async def delete_one(self, filter_: dict[str, Any]):
        for index, document in enumerate(self.documents):
            if self._matches(document, filter_):
                self.documents.pop(index)
                return type("DeleteResult", (), {"deleted_count": 1})()
        return type("DeleteResult", (), {"deleted_count": 0})()

    async def count_documents(self, filter_: dict[str, Any]) -> int:
        return sum(1 for document in self.documents if self._matches(document, filter_))

    async def create_indexes(self, indexes: Iterable[Any]):
        created = []
        for raw in indexes:
            document = getattr(raw, "document", raw)
            name = document.get("name")
            key_spec = document.get("key")
            if isinstance(key_spec, dict):
                keys = tuple(key_spec.items())
            elif isinstance(key_spec, list):
                keys = tuple(tuple(entry) for entry in key_spec)
            else:
                keys = ()
            self.created_indexes.append(
                {"name": name, "keys": keys, "unique": bool(document.get("unique"))}
            )
            created.append(name)
        return created


class StubDatabase:
    """Dictionary-like helper that returns stub collections."""

    def __init__(self, unique_fields: Dict[str, Iterable[str]] | None = None) -> None:
        self._collections: dict[str, StubCollection] = {}
        self._unique_fields = dict(unique_fields or {})

    def __getitem__(self, name: str) -> StubCollection:
        if name not in self._collections:
            self._collections[name] = StubCollection(self._unique_fields.get(name, ()))
        return self._collections[name]


class StubRawgClient:
    """Scripted stand-in for :class:`retrovault.rawg.RawgClient` that records calls."""

    def __init__(
        self,
        results: List[Dict[str, Any]] | None = None,
        *,
        configured: bool = True,
        error: Exception | None = None,
        count: int | None = None,
        details: Dict[int, Dict[str, Any] | Exception] | None = None,
    ) -> None:
        self._results = list(results or [])
        self._configured = configured
        self._error = error
        self._count = count
        self._details = dict(details or {})
        self.calls: list[dict[str, Any]] = []
        self.detail_calls: list[int] = []

    @property
    def is_configured(self) -> bool:
        return self._configured

    async def search_games(self, query: str, *, platform_id: str | None = None, **_: Any) -> Dict[str, Any]:
        self.calls.append({"query": query, "platform_id": platform_id})
        if self._error:
            raise self._error
        count = self._count if self._count is not None else len(self._results)
        return {"count": count, "results": deepcopy(self._results)}

    async def get_game_details(self, game_id: int) -> Dict[str, Any]:
        """Return scripted details; unscripted ids get an empty payload."""
        self.detail_calls.append(game_id)
        details = self._details.get(game_id, {"id": game_id})
        if isinstance(details, Exception):
            raise details
        return deepcopy(details)


def rawg_item(
    external_id: int,
    name: str,
    *,
    platforms: List[tuple[int, str]] | None = None,
    genres: List[str] | None = None,
    released: str | None = "1987-08-22",
    rating: float | None = 4.2,
    metacritic: int | None = None,
    background_image: str | None = None,
    description_raw: str | None = None,
) -> Dict[str, Any]:
    """Build a RAWG search result item in the upstream JSON shape."""
    item: Dict[str, Any] = {
        "id": external_id,
        "name": name,
        "released": released,
        "background_image": background_image or f"https://media.rawg.io/{external_id}.jpg",
        "rating": rating,
        "metacritic": metacritic,
        "platforms": [
            {"platform": {"id": platform_id, "name": platform_name, "slug": platform_name.lower()}}
            for platform_id, platform_name in (platforms or [])
        ],
        "genres": [{"id": index, "name": genre} for index, genre in enumerate(genres or [])],
    }
    if description_raw is not None:
        item["description_raw"] = description_raw
    return item


def sign_up_and_sign_in(
    client: Any,
    *,
    email: str,
    password: str = "cartridge",
    name: str = "Collector",
) -> Dict[str, Any]:
    """Create an account and start a session on ``client``; returns the user payload."""
    signup = client.post("/api/signup", json={"name": name, "email": email, "password": password})
    assert signup.status_code == 201, signup.text
    session = client.post("/api/session", json={"email": email, "password": password})
    assert session.status_code == 200, session.text
    return session.json()["user"]
