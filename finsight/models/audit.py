"""
Audit Models for Finsight

Every mutation of a user's ledger is logged as an audit event:
1. Traceability of what changed and when
2. Debugging information when a batch fails part way
3. A record of AI service failures, which never reach the user

DESIGN DECISION: Audit events are append-only log records. They are
written to the structured log stream, not to the document store.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Session
    USER_SIGNED_IN = "user_signed_in"
    USER_SIGNED_OUT = "user_signed_out"
    SIGN_IN_FAILED = "sign_in_failed"
    PASSWORD_RESET_REQUESTED = "password_reset_requested"

    # Ledger
    ACCOUNT_CREATED = "account_created"
    ACCOUNT_UPDATED = "account_updated"
    ACCOUNT_DELETED = "account_deleted"
    TRANSACTION_SAVED = "transaction_saved"
    TRANSACTION_DELETED = "transaction_deleted"
    TRANSFER_RECORDED = "transfer_recorded"

    # Categories
    CATEGORIES_SEEDED = "categories_seeded"
    CATEGORY_CREATED = "category_created"
    CATEGORY_RENAMED = "category_renamed"
    CATEGORY_DELETED = "category_deleted"

    # Planning
    BUDGETS_SAVED = "budgets_saved"
    BUDGET_DELETED = "budget_deleted"
    GOAL_SAVED = "goal_saved"
    GOAL_DELETED = "goal_deleted"

    # Bulk operations
    RECORDS_CLEARED = "records_cleared"
    CLEAR_INCOMPLETE = "clear_incomplete"

    # Reads
    REPORT_GENERATED = "report_generated"

    # System events
    EXTERNAL_SERVICE_ERROR = "external_service_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every significant action creates one of these.
    """

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # What entity is this about?
    user_id: Optional[str] = Field(
        default=None,
        description="Owner of the data being changed"
    )
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'account', 'budget', 'goal')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="Document id of the entity"
    )

    correlation_id: Optional[UUID] = Field(
        default=None,
        description="Ties together the events of one user action"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "user_id": self.user_id,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.account_created(uid, account_id, name, correlation_id)
        event = AuditEventBuilder.records_cleared(uid, "all", 42, correlation_id)
    """

    @staticmethod
    def signed_in(user_id: str, anonymous: bool) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_SIGNED_IN,
            user_id=user_id,
            description="Anonymous sign-in" if anonymous else "Email sign-in",
            details={"anonymous": anonymous},
            is_user_action=True,
        )

    @staticmethod
    def sign_in_failed(reason: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SIGN_IN_FAILED,
            severity=AuditSeverity.WARNING,
            description="Sign-in rejected",
            error_message=reason,
            is_user_action=True,
        )

    @staticmethod
    def account_created(
        user_id: str,
        account_id: str,
        name: str,
        opening_balance: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACCOUNT_CREATED,
            user_id=user_id,
            entity_type="account",
            entity_id=account_id,
            correlation_id=correlation_id,
            description=f"Account created: {name}",
            details={"opening_balance": opening_balance},
            is_user_action=True,
        )

    @staticmethod
    def account_deleted(
        user_id: str,
        account_id: str,
        transaction_count: int,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACCOUNT_DELETED,
            user_id=user_id,
            entity_type="account",
            entity_id=account_id,
            correlation_id=correlation_id,
            description=f"Account deleted with {transaction_count} transactions",
            details={"transaction_count": transaction_count},
            is_user_action=True,
        )

    @staticmethod
    def transaction_saved(
        user_id: str,
        transaction_id: str,
        transaction_type: str,
        amount: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_SAVED,
            user_id=user_id,
            entity_type="transaction",
            entity_id=transaction_id,
            correlation_id=correlation_id,
            description=f"Transaction saved: {transaction_type} {amount}",
            details={"type": transaction_type, "amount": amount},
            is_user_action=True,
        )

    @staticmethod
    def transfer_recorded(
        user_id: str,
        source_id: str,
        destination_id: str,
        amount: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSFER_RECORDED,
            user_id=user_id,
            entity_type="account",
            entity_id=source_id,
            correlation_id=correlation_id,
            description=f"Transfer of {amount} recorded",
            details={"destination_account_id": destination_id, "amount": amount},
            is_user_action=True,
        )

    @staticmethod
    def category_renamed(
        user_id: str,
        category_id: str,
        old_name: str,
        new_name: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CATEGORY_RENAMED,
            user_id=user_id,
            entity_type="category",
            entity_id=category_id,
            correlation_id=correlation_id,
            description=f"Category renamed: {old_name} -> {new_name}",
            details={"old_name": old_name, "new_name": new_name},
            is_user_action=True,
        )

    @staticmethod
    def category_deleted(
        user_id: str,
        category_id: str,
        budget_count: int,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CATEGORY_DELETED,
            user_id=user_id,
            entity_type="category",
            entity_id=category_id,
            correlation_id=correlation_id,
            description=f"Category deleted along with {budget_count} budgets",
            details={"budget_count": budget_count},
            is_user_action=True,
        )

    @staticmethod
    def budgets_saved(
        user_id: str,
        month: str,
        count: int,
        carried_forward: bool,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BUDGETS_SAVED,
            user_id=user_id,
            entity_type="budget",
            correlation_id=correlation_id,
            description=f"{count} budgets saved for {month}",
            details={"month": month, "count": count, "carried_forward": carried_forward},
            is_user_action=True,
        )

    @staticmethod
    def records_cleared(
        user_id: str,
        scope: str,
        deleted_count: int,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORDS_CLEARED,
            severity=AuditSeverity.WARNING,
            user_id=user_id,
            correlation_id=correlation_id,
            description=f"Records cleared ({scope}): {deleted_count} documents",
            details={"scope": scope, "deleted_count": deleted_count},
            is_user_action=True,
        )

    @staticmethod
    def clear_incomplete(
        user_id: str,
        cleared_account_ids: list[str],
        error_message: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CLEAR_INCOMPLETE,
            severity=AuditSeverity.ERROR,
            user_id=user_id,
            correlation_id=correlation_id,
            description="Clear stopped part way; earlier commits were kept",
            details={"cleared_account_ids": cleared_account_ids},
            error_message=error_message,
        )

    @staticmethod
    def external_service_error(
        service: str,
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTERNAL_SERVICE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"External service error: {service}",
            error_message=error_message,
            details={"service": service},
            correlation_id=correlation_id,
        )
