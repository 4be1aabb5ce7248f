"""
Reading and writing JSON list files of validated documents.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Sequence, Type, TypeVar

from pydantic import BaseModel, ValidationError

from ..domain.exceptions import PersistenceError

logger = logging.getLogger(__name__)

DocumentT = TypeVar("DocumentT", bound=BaseModel)


def read_documents(path: Path, model: Type[DocumentT]) -> List[DocumentT]:
    """
    Load a JSON list from ``path`` and validate each item as ``model``.

    A missing file is an empty list. Items that fail validation are skipped
    with a warning.

    Raises:
        PersistenceError: If the file cannot be read, is not JSON or is not a list
    """
    if not path.exists():
        return []

    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        raise PersistenceError(f"Could not read {path}: {exc}") from exc

    if not isinstance(raw, list):
        raise PersistenceError(f"{path} must contain a JSON list, got {type(raw).__name__}.")

    documents: List[DocumentT] = []
    for item in raw:
        try:
            documents.append(model.model_validate(item))
        except ValidationError as exc:
            logger.warning("Skipping invalid %s in %s: %s", model.__name__, path, exc)
    return documents


def write_documents(path: Path, documents: Sequence[BaseModel]) -> None:
    """
    Replace ``path`` with ``documents`` serialized by alias.

    The list is written to a sibling temp file first and moved into place.
    """
    payload = [
        document.model_dump(by_alias=True, mode="json", exclude_none=True)
        for document in documents
    ]
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2)
        tmp_path.replace(path)
    except OSError as exc:
        raise PersistenceError(f"Could not write {path}: {exc}") from exc
