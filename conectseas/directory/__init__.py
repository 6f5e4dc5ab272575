"""LDAP directory bridge.

Public API:
    - DirectoryConfig
    - DirectoryUserRecord
    - AuthFailureReason / AuthResult
    - DiagnosticTrace / TraceStep
    - DirectoryClient
"""

from .models import (
    AuthFailureReason,
    AuthResult,
    DiagnosticTrace,
    DirectoryConfig,
    DirectoryUserRecord,
    TraceStep,
)
from .client import DirectoryClient, DirectoryStepError

__all__ = [
    "AuthFailureReason",
    "AuthResult",
    "DiagnosticTrace",
    "DirectoryClient",
    "DirectoryConfig",
    "DirectoryStepError",
    "DirectoryUserRecord",
    "TraceStep",
]
