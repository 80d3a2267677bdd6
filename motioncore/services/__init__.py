"""
Services module - Application business logic layer.

Modules:
- store: Database access for sessions, plans and user settings
- analytics: Statistics, records, summary and health metric engines
- transfer: Versioned JSON export/import and bulk delete
"""
# Main exports for convenience
from motioncore.services.store import SessionStore
from motioncore.services.transfer import DataIOService, TransferKind

__all__ = [
    "SessionStore",
    "DataIOService",
    "TransferKind",
]
