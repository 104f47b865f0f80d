"""
Domain dataclasses used across the application.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from portal_access.config import ACCESS_LEVEL_RANGE


class Role(str, Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    PARTNER = "partner"
    OPERATOR = "operator"
    CLIENT = "client"

    @classmethod
    def parse(cls, value) -> Optional["Role"]:
        """Return the Role for *value*, or None when it is not a known role."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


class ResourceKind(str, Enum):
    SERVICE_POINT = "service_point"
    OPERATOR = "operator"
    BOOKING = "booking"
    REVIEW = "review"
    CLIENT = "client"

    @classmethod
    def parse(cls, value) -> Optional["ResourceKind"]:
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


def _parse_timestamp(value) -> Optional[datetime]:
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def _optional_int(value) -> Optional[int]:
    return int(value) if value is not None else None


@dataclass(frozen=True)
class Actor:
    """Snapshot of the authenticated identity, supplied by the auth layer."""
    id: int
    role: str                              # raw role string; see Role.parse
    partner_id: Optional[int] = None
    operator_id: Optional[int] = None
    client_id: Optional[int] = None
    service_point_ids: Tuple[int, ...] = ()  # active assignments (operators only)

    @property
    def role_kind(self) -> Optional[Role]:
        return Role.parse(self.role)


@dataclass(frozen=True)
class CapabilitySet:
    """What an actor may see and do. Always built by permissions.resolve()."""
    role: Optional[Role] = None

    can_view_all_clients: bool = False
    can_view_all_bookings: bool = False
    can_view_all_service_points: bool = False
    can_view_all_operators: bool = False
    can_view_all_reviews: bool = False
    can_manage_users: bool = False
    can_manage_partners: bool = False
    can_manage_operators: bool = False
    can_view_audit_logs: bool = False
    can_create_service_point: bool = False
    can_create_operator: bool = False
    can_view_own_service_points: bool = False

    partner_id: Optional[int] = None
    operator_id: Optional[int] = None
    client_id: Optional[int] = None
    assigned_service_point_ids: Optional[Tuple[int, ...]] = None

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    @property
    def is_manager(self) -> bool:
        return self.role is Role.MANAGER

    @property
    def is_partner(self) -> bool:
        return self.role is Role.PARTNER

    @property
    def is_operator(self) -> bool:
        return self.role is Role.OPERATOR

    @property
    def is_client(self) -> bool:
        return self.role is Role.CLIENT

    @property
    def has_full_access(self) -> bool:
        return self.role in (Role.ADMIN, Role.MANAGER)


@dataclass
class ServicePoint:
    id: int
    partner_id: int
    name: str
    address: str = ""
    is_active: bool = True

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ServicePoint":
        return cls(
            id=int(data["id"]),
            partner_id=int(data["partner_id"]),
            name=str(data.get("name") or ""),
            address=str(data.get("address") or ""),
            is_active=bool(data.get("is_active", True)),
        )


@dataclass
class Operator:
    id: int
    partner_id: int
    user_id: int
    access_level: int = 1
    is_active: bool = True

    def __post_init__(self):
        if self.access_level not in ACCESS_LEVEL_RANGE:
            raise ValueError(
                f"Operator access_level must be between {ACCESS_LEVEL_RANGE.start} "
                f"and {ACCESS_LEVEL_RANGE.stop - 1}, got {self.access_level}."
            )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Operator":
        user = data.get("user") or {}
        return cls(
            id=int(data["id"]),
            partner_id=int(data["partner_id"]),
            user_id=int(data.get("user_id", user.get("id"))),
            access_level=int(data.get("access_level", 1)),
            is_active=bool(data.get("is_active", True)),
        )


@dataclass
class Assignment:
    """One operator ↔ service point binding. Revoked rows keep is_active=False."""
    id: int
    operator_id: int
    service_point_id: int
    is_active: bool
    assigned_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    service_point_name: str = ""
    partner_id: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Assignment":
        point = data.get("service_point_info") or {}
        partner = data.get("partner_info") or {}
        return cls(
            id=int(data["id"]),
            operator_id=int(data["operator_id"]),
            service_point_id=int(data["service_point_id"]),
            is_active=bool(data.get("is_active", True)),
            assigned_at=_parse_timestamp(data.get("assigned_at")),
            created_at=_parse_timestamp(data.get("created_at")),
            updated_at=_parse_timestamp(data.get("updated_at")),
            service_point_name=str(data.get("service_point_name") or point.get("name") or ""),
            partner_id=_optional_int(data.get("partner_id", partner.get("id"))),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "operator_id": self.operator_id,
            "service_point_id": self.service_point_id,
            "service_point_name": self.service_point_name,
            "partner_id": self.partner_id,
            "is_active": self.is_active,
            "assigned_at": self.assigned_at.isoformat() if self.assigned_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


@dataclass
class BulkFailure:
    service_point_id: int
    service_point_name: str
    error: str
    code: str = "rejected"     # "conflict", "validation" or "rejected" (server-side)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "service_point_id": self.service_point_id,
            "service_point_name": self.service_point_name,
            "error": self.error,
            "code": self.code,
        }


@dataclass
class BulkSummary:
    total_requested: int
    successful: int
    failed: int


@dataclass
class BulkResult:
    """Per-item outcome of a bulk assignment. Partial failure is a normal result."""
    succeeded: List[Assignment] = field(default_factory=list)
    failed: List[BulkFailure] = field(default_factory=list)
    summary: BulkSummary = field(default_factory=lambda: BulkSummary(0, 0, 0))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "data": [a.to_dict() for a in self.succeeded],
            "errors": [f.to_dict() for f in self.failed],
            "meta": {
                "total_requested": self.summary.total_requested,
                "successful": self.summary.successful,
                "failed": self.summary.failed,
            },
        }
