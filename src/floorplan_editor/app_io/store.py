from __future__ import annotations

import copy
import json
import logging
import os
import tempfile
from typing import Dict, Protocol

from ..core.errors import RecordNotFoundError, StoreError
from ..core.model import FloorplanRecord

logger = logging.getLogger(__name__)


class RecordStore(Protocol):
    """Keyed floorplan storage, one record per property."""

    def load_floorplan(self, property_id: str) -> FloorplanRecord:
        ...

    def save_floorplan(self, record: FloorplanRecord) -> None:
        ...


class InMemoryRecordStore:
    """Record store kept in a dict; records are copied in and out."""

    def __init__(self) -> None:
        self.records: Dict[str, FloorplanRecord] = {}
        self.save_count = 0

    def load_floorplan(self, property_id: str) -> FloorplanRecord:
        try:
            return copy.deepcopy(self.records[property_id])
        except KeyError:
            raise RecordNotFoundError(property_id) from None

    def save_floorplan(self, record: FloorplanRecord) -> None:
        self.records[record.property_id] = copy.deepcopy(record)
        self.save_count += 1


class JsonFileRecordStore:
    """Stores each property's record as ``<property_id>.json`` in a directory."""

    def __init__(self, directory: str) -> None:
        self.directory = directory

    def path_for(self, property_id: str) -> str:
        safe = property_id.replace(os.sep, '_')
        if os.altsep:
            safe = safe.replace(os.altsep, '_')
        return os.path.join(self.directory, f"{safe}.json")

    def load_floorplan(self, property_id: str) -> FloorplanRecord:
        path = self.path_for(property_id)
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except FileNotFoundError:
            raise RecordNotFoundError(property_id) from None
        except (OSError, ValueError) as e:
            raise StoreError(f"Failed to read floorplan {property_id}: {e}") from e
        try:
            return FloorplanRecord.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            raise StoreError(f"Malformed floorplan record {property_id}: {e}") from e

    def save_floorplan(self, record: FloorplanRecord) -> None:
        path = self.path_for(record.property_id)
        tmp_path = None
        try:
            os.makedirs(self.directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix='.floorplan-', suffix='.json', dir=self.directory)
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(record.to_dict(), f, indent=2)
            os.replace(tmp_path, path)
            tmp_path = None
        except OSError as e:
            raise StoreError(f"Failed to save floorplan {record.property_id}: {e}") from e
        finally:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.remove(tmp_path)
        logger.info("Saved floorplan %s to %s", record.property_id, path)
