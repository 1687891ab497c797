"""
Backup documents: export, validation, import and the local backup slot.
"""
import json
import logging
import random
import string
import time
from datetime import datetime, timezone
from numbers import Number
from typing import Any, Callable, List, Optional, Tuple, Union

from pydantic import ValidationError

from models.schemas import BackupDocument, Candidate, StorageUsage
from storage.candidate_store import CandidateStore
from storage.kv_store import KeyValueStore
from utils.config import config as default_config, Config
from utils.errors import FormatError, ParseError, StorageError

logger = logging.getLogger(__name__)

REQUIRED_CANDIDATE_FIELDS = ("id", "name", "email", "phone")

_ID_ALPHABET = string.ascii_lowercase + string.digits


def new_import_id(rng: Optional[random.Random] = None) -> str:
    """Fresh identifier for an imported candidate."""
    rng = rng or random.Random()
    suffix = "".join(rng.choice(_ID_ALPHABET) for _ in range(9))
    return f"imported_{int(time.time() * 1000)}_{suffix}"


class BackupManager:
    """
    Serializes the candidate collection and reads it back.
    Never mutates the records it is given.
    """

    def __init__(
        self,
        kv: KeyValueStore,
        config: Optional[Config] = None,
        rng: Optional[random.Random] = None,
    ):
        self.kv = kv
        self.config = config or default_config
        self.rng = rng or random.Random()

    # ========================================
    # Export
    # ========================================

    def create_backup(self, candidates: List[Candidate]) -> BackupDocument:
        return BackupDocument(
            candidates=candidates,
            export_date=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            version=self.config.backup.schema_version,
            app_version=self.config.backup.app_version,
        )

    def export_filename(self) -> str:
        today = datetime.now(timezone.utc).date().isoformat()
        return f"{self.config.backup.filename_prefix}-{today}.json"

    def serialize(self, candidates: List[Candidate]) -> Tuple[bytes, str]:
        """Pretty-printed backup bytes and the download filename."""
        backup = self.create_backup(candidates)
        payload = json.dumps(backup.to_wire(), indent=2).encode("utf-8")
        return payload, self.export_filename()

    def export_to_file(self, candidates: List[Candidate], writer: Callable[[bytes, str], Any]):
        """Hand the backup to a download writer."""
        payload, filename = self.serialize(candidates)
        writer(payload, filename)
        logger.info(f"Exported {len(candidates)} candidates to {filename}")

    # ========================================
    # Validation and import
    # ========================================

    @staticmethod
    def validate(data: Any) -> bool:
        """
        Structural check of a backup document.

        Any missing or mistyped field rejects the whole document.
        """
        if not isinstance(data, dict):
            return False
        if not isinstance(data.get("candidates"), list):
            return False
        if not isinstance(data.get("exportDate"), str):
            return False
        version = data.get("version")
        if isinstance(version, bool) or not isinstance(version, Number):
            return False

        for candidate in data["candidates"]:
            if not isinstance(candidate, dict):
                return False
            if not all(candidate.get(f) for f in REQUIRED_CANDIDATE_FIELDS):
                return False
            if not isinstance(candidate.get("answers"), list):
                return False

        return True

    def import_document(self, raw: Union[str, bytes]) -> List[Candidate]:
        """
        Parse and validate a backup document.

        Raises:
            ParseError: the input is not well-formed JSON
            FormatError: the document does not match the backup schema
        """
        try:
            if isinstance(raw, bytes):
                raw = raw.decode("utf-8-sig")
            else:
                raw = raw.lstrip("\ufeff")
            data = json.loads(raw)
        except (ValueError, RecursionError) as e:
            # ValueError covers UnicodeDecodeError and JSONDecodeError
            raise ParseError("Failed to parse backup file") from e

        if not self.validate(data):
            raise FormatError("Invalid backup file format")

        try:
            document = BackupDocument.model_validate(data)
        except ValidationError as e:
            raise FormatError("Invalid backup file format") from e

        if document.version != self.config.backup.schema_version:
            logger.warning(
                f"Importing backup version {document.version}, "
                f"expected {self.config.backup.schema_version}"
            )

        return document.candidates

    def import_into(self, store: CandidateStore, raw: Union[str, bytes]) -> List[Candidate]:
        """
        Import a document and add its candidates under new identifiers.

        Import is additive: existing records are never overwritten.
        """
        imported = [
            c.model_copy(update={"id": new_import_id(self.rng)}, deep=True)
            for c in self.import_document(raw)
        ]
        store.add_candidates(imported)
        logger.info(f"Imported {len(imported)} candidates")
        return imported

    # ========================================
    # Local backup slot
    # ========================================

    def save_local_backup(self, candidates: List[Candidate]):
        backup = self.create_backup(candidates)
        self.kv.set(self.config.storage.backup_key, json.dumps(backup.to_wire()))
        logger.info(f"Saved local backup of {len(candidates)} candidates")

    def load_local_backup(self) -> Optional[List[Candidate]]:
        """Candidates from the local backup, or None if absent or invalid."""
        try:
            raw = self.kv.get(self.config.storage.backup_key)
            if raw is None:
                return None
            return self.import_document(raw)
        except (ParseError, FormatError, StorageError) as e:
            logger.error(f"Failed to load local backup: {e}")
            return None

    def clear_local_backup(self):
        self.kv.remove(self.config.storage.backup_key)

    # ========================================
    # Storage usage
    # ========================================

    def storage_usage(self) -> StorageUsage:
        """
        Estimate usage of the assumed quota.

        Only the state document and the backup document are counted.
        """
        storage = self.config.storage
        used = self.kv.size_of(storage.state_key) + self.kv.size_of(storage.backup_key)
        available = storage.quota_bytes
        percentage = used / available * 100

        return StorageUsage(
            used_bytes=used,
            available_bytes=available,
            percentage=percentage,
            nearly_full=percentage > storage.warning_percentage,
        )
