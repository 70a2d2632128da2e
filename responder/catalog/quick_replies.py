"""Quick-reply catalog: use-case key -> reply template, loaded from a JSON store."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator, Mapping
from pathlib import Path
from types import MappingProxyType

from pydantic import ValidationError

from responder.errors import CatalogError, CatalogMissError
from responder.models import QuickReplyDefinition

logger = logging.getLogger(__name__)

_ABSOLUTE_PREFIXES = ("http://", "https://", "//")


def parse_catalog(data: object) -> Mapping[str, QuickReplyDefinition]:
    """Validate a raw catalog document into a read-only mapping.

    A bare string value is shorthand for a plain text template.
    """
    if not isinstance(data, dict):
        raise CatalogError("Quick-reply store must be a JSON object")

    entries: dict[str, QuickReplyDefinition] = {}
    for key, value in data.items():
        if isinstance(value, str):
            value = {"text": value}
        try:
            entries[key] = QuickReplyDefinition.model_validate(value)
        except ValidationError as exc:
            raise CatalogError(f"Invalid quick-reply definition {key!r}: {exc}") from exc
    return MappingProxyType(entries)


def resolve_images(definition: QuickReplyDefinition, base_url: str) -> QuickReplyDefinition:
    """Return a copy with every relative ``image_url`` prefixed by ``base_url``.

    Absolute URLs are left alone, so resolving twice is harmless.
    """
    if not definition.quick_replies:
        return definition

    base = base_url.rstrip("/")
    options = []
    changed = False
    for option in definition.quick_replies:
        image = option.image_url
        if image and not image.startswith(_ABSOLUTE_PREFIXES):
            option = option.model_copy(update={"image_url": f"{base}/{image.lstrip('/')}"})
            changed = True
        options.append(option)

    if not changed:
        return definition
    return definition.model_copy(update={"quick_replies": tuple(options)})


class QuickReplyCatalog:
    """Process-wide read-only snapshot of the quick-reply store.

    ``load()`` replaces the whole snapshot at once; entries are never mutated
    in place, so concurrent readers always see a consistent catalog.
    """

    def __init__(
        self,
        entries: Mapping[str, QuickReplyDefinition] | None = None,
        path: str | None = None,
    ) -> None:
        self._path = Path(path) if path else None
        self._entries: Mapping[str, QuickReplyDefinition] = MappingProxyType(dict(entries or {}))

    @classmethod
    def from_file(cls, path: str) -> QuickReplyCatalog:
        catalog = cls(path=path)
        catalog.load()
        return catalog

    @property
    def entries(self) -> Mapping[str, QuickReplyDefinition]:
        return self._entries

    def load(self) -> Mapping[str, QuickReplyDefinition]:
        """Re-read the store and swap in the new snapshot.

        On any read or validation failure the previous snapshot is kept.
        """
        if self._path is None:
            raise CatalogError("Catalog has no backing store to load from")
        try:
            data = json.loads(self._path.read_text())
        except (OSError, json.JSONDecodeError) as exc:
            raise CatalogError(f"Cannot read quick-reply store {self._path}: {exc}") from exc

        self._entries = parse_catalog(data)
        logger.info("Loaded %d quick-reply definitions from %s", len(self._entries), self._path)
        return self._entries

    def lookup(self, key: str) -> QuickReplyDefinition | None:
        return self._entries.get(key)

    def require(self, key: str) -> QuickReplyDefinition:
        definition = self._entries.get(key)
        if definition is None:
            raise CatalogMissError(key)
        return definition

    def keys(self) -> list[str]:
        return list(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)
