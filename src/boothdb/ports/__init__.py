"""Port interfaces for boothdb.

Ports define the contracts that adapters must implement. The runner and
bootstrapper depend only on these abstractions, so tests can substitute
fakes for the version store or the session.
"""

from boothdb.ports.db_session import DbSessionPort
from boothdb.ports.version_store import VersionStorePort

__all__ = [
    "DbSessionPort",
    "VersionStorePort",
]
