from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal, Optional

DEFAULT_PORT = 389
LDAPS_PORT = 636

StepStatus = Literal["success", "warning", "error", "info"]


@dataclass(frozen=True)
class DirectoryConfig:
    enabled: bool = False
    host: str = ""
    port: int = DEFAULT_PORT
    base_dn: str = ""
    bind_dn: str = ""
    bind_password: str = field(default="", repr=False)

    @property
    def effective_port(self) -> int:
        return int(self.port or DEFAULT_PORT)

    @property
    def is_configured(self) -> bool:
        return bool(self.enabled and (self.host or "").strip() and (self.base_dn or "").strip())


@dataclass(frozen=True)
class DirectoryUserRecord:
    distinguished_name: str
    account_name: str
    display_name: str
    email: str
    department: Optional[str] = None
    title: Optional[str] = None


class AuthFailureReason(str, Enum):
    NOT_CONFIGURED = "not_configured"
    CONNECTION_ERROR = "connection_error"
    SERVICE_BIND_FAILED = "service_bind_failed"
    USER_SEARCH_FAILED = "user_search_failed"
    USER_NOT_FOUND = "user_not_found"
    AMBIGUOUS_USER = "ambiguous_user"
    INVALID_CREDENTIALS = "invalid_credentials"
    USER_AUTH_ERROR = "user_auth_error"


@dataclass(frozen=True)
class AuthResult:
    """Outcome of a directory login attempt.

    `message` carries the directory's own explanation for logs and audit;
    it must never be shown to the person trying to log in.
    """

    success: bool
    user: Optional[DirectoryUserRecord] = None
    reason: Optional[AuthFailureReason] = None
    message: str = ""

    @classmethod
    def ok(cls, user: DirectoryUserRecord) -> "AuthResult":
        return cls(success=True, user=user)

    @classmethod
    def fail(cls, reason: AuthFailureReason, message: str = "") -> "AuthResult":
        return cls(success=False, reason=reason, message=message)


@dataclass
class TraceStep:
    step: str
    status: StepStatus
    message: str
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"step": self.step, "status": self.status, "message": self.message}
        data.update(self.extra)
        return data


@dataclass
class DiagnosticTrace:
    url: str
    protocol: str
    success: bool = False
    steps: list[TraceStep] = field(default_factory=list)
    error: str = ""
    details: str = ""

    def add(self, step: str, status: StepStatus, message: str, **extra: Any) -> TraceStep:
        item = TraceStep(step=step, status=status, message=message, extra=extra)
        self.steps.append(item)
        return item

    @property
    def last_step(self) -> Optional[TraceStep]:
        return self.steps[-1] if self.steps else None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "success": self.success,
            "url": self.url,
            "protocol": self.protocol,
            "steps": [s.to_dict() for s in self.steps],
        }
        if self.error:
            data["error"] = self.error
        if self.details:
            data["details"] = self.details
        return data
