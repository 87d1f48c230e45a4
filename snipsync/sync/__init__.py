"""
Remote synchronization of the primary snippet file.

Import SyncManager and create_client from snipsync.sync.sync_manager.
"""

from snipsync.sync.base import RemoteClient, Snapshot

__all__ = ["RemoteClient", "Snapshot"]
