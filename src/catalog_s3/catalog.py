from catalog_s3.interfaces import ICatalogRegistry
from dataclasses import dataclass
from typing import Optional
from typing import Union
from zope.interface import implementer

import logging
import threading


logger = logging.getLogger(__name__)

# Files whose location is chosen by the caller through a CustomPath.
CUSTOM_CATALOG = "custom_catalog"

_IDENTITY_PATTERN = "%s"


class InvalidInputError(ValueError):
    """Raised for arguments rejected before any request is sent."""


class UnknownCatalogError(InvalidInputError):
    """Raised by strict resolution when a catalog type was never registered."""


@dataclass(frozen=True)
class EntityID:
    value: int


@dataclass(frozen=True)
class CustomPath:
    path: str


@dataclass
class StoragePath:
    """Where a file (or a family of files) lives in the bucket.

    ``catalog_type`` selects a pattern from the registry. ``target`` fills
    the pattern's slot: an ``EntityID`` for ordinary catalogs, a
    ``CustomPath`` for ``CUSTOM_CATALOG``. ``root_catalog`` is overwritten
    by the manager with its configured root before resolution.
    """

    catalog_type: str = ""
    target: Optional[Union[EntityID, CustomPath]] = None
    root_catalog: str = ""

    @classmethod
    def for_entity(cls, catalog_type, entity_id):
        return cls(catalog_type=catalog_type, target=EntityID(int(entity_id)))

    @classmethod
    def custom(cls, path):
        return cls(catalog_type=CUSTOM_CATALOG, target=CustomPath(path))

    @classmethod
    def root(cls):
        return cls()


@implementer(ICatalogRegistry)
class CatalogRegistry:
    """Catalog type -> path pattern mapping.

    Reads and writes are serialized by a lock, so catalogs may be added
    while the owning manager is in use by other threads.
    """

    def __init__(self, patterns=None):
        self._lock = threading.Lock()
        self._patterns = {CUSTOM_CATALOG: _IDENTITY_PATTERN}
        if patterns:
            self._patterns.update(patterns)

    def register(self, catalog_type, path_pattern):
        with self._lock:
            previous = self._patterns.get(catalog_type)
            self._patterns[catalog_type] = path_pattern
        if previous is not None and previous != path_pattern:
            logger.debug(
                "Catalog %r pattern replaced: %r -> %r",
                catalog_type,
                previous,
                path_pattern,
            )

    def resolve(self, catalog_type):
        with self._lock:
            return self._patterns.get(catalog_type)

    def registered(self):
        with self._lock:
            return dict(self._patterns)

    def __contains__(self, catalog_type):
        with self._lock:
            return catalog_type in self._patterns

    def __len__(self):
        with self._lock:
            return len(self._patterns)


def _slot_value(catalog_type, target):
    if catalog_type == CUSTOM_CATALOG:
        if not isinstance(target, CustomPath):
            raise InvalidInputError(
                f"catalog {catalog_type!r} needs a CustomPath, got {target!r}"
            )
        return target.path
    if not isinstance(target, EntityID):
        raise InvalidInputError(
            f"catalog {catalog_type!r} needs an EntityID, got {target!r}"
        )
    return target.value


def resolve_catalog_path(registry, storage_path, strict=False):
    """Return the key prefix for ``storage_path``: root plus formatted pattern.

    An unregistered catalog type yields ``""`` so the file lands at the
    bare key, unless ``strict`` is set, in which case
    ``UnknownCatalogError`` is raised instead.
    """
    catalog_type = storage_path.catalog_type
    pattern = registry.resolve(catalog_type)
    if pattern is None:
        if strict:
            raise UnknownCatalogError(f"catalog {catalog_type!r} is not registered")
        logger.debug("Catalog %r is not registered, using empty prefix", catalog_type)
        return ""

    value = _slot_value(catalog_type, storage_path.target)
    try:
        path = pattern % value
    except (TypeError, ValueError) as e:
        raise InvalidInputError(
            f"pattern {pattern!r} of catalog {catalog_type!r} "
            f"cannot be formatted with {value!r}: {e}"
        ) from e

    return storage_path.root_catalog + path
