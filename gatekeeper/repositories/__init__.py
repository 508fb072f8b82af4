from .base import BaseRepository
from .biometric_repo import FaceEmbeddingRepository, FingerprintTemplateRepository
from .entry_repo import EntryLogRepository
from .person_repo import PersonRepository
from .topology_repo import DeviceRepository, NodeRepository, VillageRepository

__all__ = [
    "BaseRepository",
    "PersonRepository",
    "FaceEmbeddingRepository",
    "FingerprintTemplateRepository",
    "EntryLogRepository",
    "VillageRepository",
    "NodeRepository",
    "DeviceRepository",
]
