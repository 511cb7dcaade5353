"""Sparse field-level edits layered over the base documents."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from typing import Any, NamedTuple

from alignment_inspector.models import EntityKind, Record

logger = logging.getLogger(__name__)

Patch = dict[str, Any]


class PatchKey(NamedTuple):
    """Composite identity of a patched record."""

    kind: EntityKind
    identifier: str

    def __str__(self) -> str:
        return f"{self.kind.value}:{self.identifier}"

    @classmethod
    def parse(cls, text: str) -> PatchKey:
        """Parse a persisted ``"<kind>:<identifier>"`` key.

        Only the first colon separates; identifiers may contain colons.
        """
        kind, sep, identifier = text.partition(":")
        if not sep:
            raise ValueError(f"Patch key has no kind prefix: {text!r}")
        return cls(EntityKind(kind), identifier)


def _field_value(original: Record | Mapping[str, Any] | None, name: str) -> Any:
    if original is None:
        return ""
    if isinstance(original, Mapping):
        value = original.get(name)
    else:
        value = getattr(original, name, None)
        if value is None and getattr(original, "extra", None):
            value = original.extra.get(name)
    return "" if value is None else value


class PatchStore:
    """Mapping of (kind, identifier) to the fields the user changed.

    The store is the only mutable structure in the core. Every write goes
    through :meth:`apply`; :attr:`version` increases on each write that
    actually changed something.
    """

    def __init__(self, patches: Mapping[PatchKey, Patch] | None = None) -> None:
        self._patches: dict[PatchKey, Patch] = {}
        self.version = 0
        for key, patch in (patches or {}).items():
            if patch:
                self._patches[key] = dict(patch)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, kind: EntityKind | str, identifier: str) -> Patch | None:
        """Return a copy of the patch for a key, or None."""
        patch = self._patches.get(PatchKey(EntityKind(kind), identifier))
        return dict(patch) if patch is not None else None

    def has_edit(self, kind: EntityKind | str, identifier: str) -> bool:
        return bool(self._patches.get(PatchKey(EntityKind(kind), identifier)))

    def keys(self, kind: EntityKind | str | None = None) -> list[PatchKey]:
        if kind is None:
            return list(self._patches)
        kind = EntityKind(kind)
        return [key for key in self._patches if key.kind == kind]

    def __len__(self) -> int:
        return len(self._patches)

    def __iter__(self) -> Iterator[PatchKey]:
        return iter(self._patches)

    def __contains__(self, key: object) -> bool:
        return key in self._patches

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def apply(
        self,
        kind: EntityKind | str,
        identifier: str,
        field_edits: Mapping[str, Any],
        original: Record | Mapping[str, Any] | None,
    ) -> bool:
        """Merge the fields of ``field_edits`` that differ from ``original``.

        Returns True if the store changed and should be persisted. Fields
        equal to the base value are dropped, but an earlier patched value for
        the same field is left in place.
        """
        changed = {
            name: value
            for name, value in field_edits.items()
            if value != _field_value(original, name)
        }
        key = PatchKey(EntityKind(kind), identifier)
        if not changed:
            logger.debug(f"No-op edit for {key} skipped")
            return False

        self._patches[key] = {**self._patches.get(key, {}), **changed}
        self.version += 1
        logger.debug(f"Patched {key}: {sorted(changed)}")
        return True

    # ------------------------------------------------------------------
    # Persisted shape
    # ------------------------------------------------------------------

    def to_mapping(self) -> dict[str, Patch]:
        """Return the flat ``{"kind:identifier": {field: value}}`` mapping."""
        return {str(key): dict(patch) for key, patch in self._patches.items()}

    @classmethod
    def from_mapping(cls, data: Any) -> PatchStore:
        """Build a store from persisted data, dropping anything malformed."""
        if not isinstance(data, Mapping):
            if data is not None:
                logger.warning(
                    f"Ignoring persisted patches of type {type(data).__name__}"
                )
            return cls()

        patches: dict[PatchKey, Patch] = {}
        for raw_key, patch in data.items():
            try:
                key = PatchKey.parse(raw_key)
            except (TypeError, ValueError, AttributeError):
                logger.warning(f"Skipping patch with malformed key {raw_key!r}")
                continue
            if not isinstance(patch, Mapping):
                logger.warning(f"Skipping non-mapping patch for {raw_key!r}")
                continue
            patches[key] = _clean_fields(raw_key, patch)
        return cls(patches)


def _clean_fields(raw_key: str, patch: Mapping[Any, Any]) -> Patch:
    """Keep the text-valued fields of a persisted patch.

    ``id`` is never patched; a record's identity comes from its key.
    """
    cleaned: Patch = {}
    for name, value in patch.items():
        if not isinstance(name, str) or name == "id":
            logger.warning(f"Skipping field {name!r} of patch {raw_key!r}")
            continue
        if value is not None and not isinstance(value, str):
            logger.warning(
                f"Skipping non-text value for {name!r} in patch {raw_key!r}"
            )
            continue
        cleaned[name] = value
    return cleaned
