# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable utilities:
# - database.py: MongoDB connection guard (lazy, single-flight connect)
# - utils.py: Shared utilities (error base class, URI redaction)
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.database import (
    ConnectionGuard,
    ConnectionState,
    DatabaseConnectionError,
)
from lib.utils import ApplicationError, ConfigurationMissingError, redact_uri

__all__ = [
    # Database
    "ConnectionGuard",
    "ConnectionState",
    "DatabaseConnectionError",
    # Utils
    "ApplicationError",
    "ConfigurationMissingError",
    "redact_uri",
]
