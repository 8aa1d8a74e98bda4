"""
artifactory_artifacts.core.enums - Type-Safe Enumerations
===========================================================

Enumerations shared by every layer of the artifact persistence core.

All enums inherit from both `str` and `Enum`, which means:
    - They serialize to strings in JSON/YAML (Pydantic-friendly)
    - They can be compared with plain strings: ErrorKind.NETWORK == "network"
    - They read well in structured log lines
"""

from enum import Enum


# =============================================================================
# Error Kind Enumeration
# =============================================================================
# Classifies a failed remote or local operation. Exceptions carry one of
# these so callers (and partial-failure reports) can branch on the kind of
# failure without inspecting exception classes:
#
#   NETWORK          → connection/timeout/5xx, retried until budget exhausted
#   AUTH_FAILURE     → credentials rejected (401/403), never retried
#   REMOTE_REJECTED  → any other 4xx on upload, never retried
#   NOT_FOUND        → object absent (404)
#   CONFIGURATION    → invalid repository configuration
#   LOCAL_IO         → local source file missing or unreadable
#   INVALID_PATH     → artifact path that cannot form a key (dot segments)
# =============================================================================
class ErrorKind(str, Enum):
    """Kinds of failure surfaced by the store and the coordinators.

    Usage:
        >>> kind = ErrorKind.NETWORK
        >>> kind.value  # "network"
        >>> kind == "network"  # True
    """

    NETWORK = "network"
    AUTH_FAILURE = "auth_failure"
    REMOTE_REJECTED = "remote_rejected"
    NOT_FOUND = "not_found"
    CONFIGURATION = "configuration"
    LOCAL_IO = "local_io"
    INVALID_PATH = "invalid_path"
