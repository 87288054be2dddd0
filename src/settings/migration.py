"""Legacy settings migration.

Older releases stored a single tracking file as ``filePath`` (plus a macOS
bookmark blob). Current settings keep a ``dataSources`` list instead.
"""

import copy
import uuid
from pathlib import Path
from typing import Any

LEGACY_KEYS = ("filePath", "fileBookmark")

# Fixed namespace so a given legacy path always maps to the same source id
SOURCE_ID_NAMESPACE = uuid.UUID("5b0f4b1e-8c3a-4a43-9d3e-6f0c2a1d7e55")


def legacy_source_id(path: str) -> str:
    return str(uuid.uuid5(SOURCE_ID_NAMESPACE, path))


def is_legacy_configuration(document: dict[str, Any]) -> bool:
    return "dataSources" not in document and any(key in document for key in LEGACY_KEYS)


def migrate_legacy_configuration(document: dict[str, Any]) -> dict[str, Any]:
    """Upgrade a settings document to the multi-source schema.

    Returns a new document; current documents are returned as an unchanged
    copy, so applying the migration repeatedly is safe.
    """
    migrated = copy.deepcopy(document)
    if not is_legacy_configuration(migrated):
        return migrated

    path = str(migrated.pop("filePath", "") or "")
    migrated.pop("fileBookmark", None)

    sources = []
    if path:
        sources.append(
            {
                "id": legacy_source_id(path),
                "name": Path(path).stem or path,
                "locator": path,
                "isEnabled": True,
            }
        )

    migrated["dataSources"] = sources
    migrated["isFirstLaunch"] = not path
    return migrated
