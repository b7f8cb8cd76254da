"""Path-addressed blob storage over a content delivery entry API."""

from cdn_store._capabilities import Capability, CapabilitySet
from cdn_store._config import ENVIRONMENTS, DriverConfig, RegistryConfig
from cdn_store._context import repository_name, use_repository
from cdn_store._driver import FileWriter, StorageDriver
from cdn_store._errors import (
    AlreadyCancelled,
    AlreadyClosed,
    AlreadyCommitted,
    CommitFailed,
    IntegrityMismatch,
    InvalidConfiguration,
    InvalidPath,
    NotFound,
    RemoteError,
    StorageError,
    TransportError,
    UnexpectedResponse,
    Unsupported,
    WriterStateError,
)
from cdn_store._gateway import EntryGateway
from cdn_store._models import Entry, FileInfo
from cdn_store._path import BucketResolver, bucket_from_path
from cdn_store._registry import Registry, create_driver, register_driver, registered_drivers
from cdn_store._writer import BufferedCommitWriter
from cdn_store.drivers import ContentDeliveryDriver

__version__ = "0.1.0"

__all__ = [
    # Core
    "StorageDriver",
    "FileWriter",
    "ContentDeliveryDriver",
    "BufferedCommitWriter",
    "EntryGateway",
    # Registry
    "Registry",
    "register_driver",
    "create_driver",
    "registered_drivers",
    # Addressing
    "BucketResolver",
    "bucket_from_path",
    "repository_name",
    "use_repository",
    # Models
    "Entry",
    "FileInfo",
    # Capabilities
    "Capability",
    "CapabilitySet",
    # Config
    "DriverConfig",
    "RegistryConfig",
    "ENVIRONMENTS",
    # Errors
    "StorageError",
    "InvalidConfiguration",
    "InvalidPath",
    "NotFound",
    "RemoteError",
    "UnexpectedResponse",
    "IntegrityMismatch",
    "Unsupported",
    "TransportError",
    "WriterStateError",
    "AlreadyClosed",
    "AlreadyCommitted",
    "AlreadyCancelled",
    "CommitFailed",
    # Version
    "__version__",
]
