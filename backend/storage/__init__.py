"""
Storage module for the Interview Assistant.
Provides key-value persistence, the candidate store and backup documents.
"""

from .kv_store import KeyValueStore, InMemoryKeyValueStore, FileKeyValueStore
from .candidate_store import CandidateStore, StatePersistence, load_store
from .backup import BackupManager

__all__ = [
    'KeyValueStore',
    'InMemoryKeyValueStore',
    'FileKeyValueStore',
    'CandidateStore',
    'StatePersistence',
    'load_store',
    'BackupManager',
]
