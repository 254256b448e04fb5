"""
Audit Logger

DESIGN DECISION: Every mutation of a user's data is logged.
This provides:
1. Traceability of what changed and when
2. Debugging capability when a multi-commit operation stops part way
3. A record of AI failures that the user never sees

The audit logger:
- Is async so flows can await it inline
- Never raises; a logging problem must not break a user action
- Supports correlation IDs to trace related events
"""

import logging
from collections import deque
from typing import Optional
from uuid import UUID, uuid4

import structlog

from finsight.models.audit import AuditEvent, AuditEventBuilder


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: int = logging.INFO) -> None:
    """Route structlog's JSON lines through the stdlib root logger."""
    logging.basicConfig(format="%(message)s", level=level)
    logging.getLogger().setLevel(level)


class AuditLogger:
    """
    Central audit logging service.

    Logs events to:
    1. The structured log stream (JSON lines)
    2. A bounded in-process buffer, shown on the settings page
    """

    def __init__(self, buffer_size: int = 200):
        self._logger = structlog.get_logger("finsight.audit")
        self._recent: deque[AuditEvent] = deque(maxlen=buffer_size)

    @property
    def recent_events(self) -> list[AuditEvent]:
        """Buffered events, newest first."""
        return list(reversed(self._recent))

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns False if the log write itself failed.
        """
        self._recent.append(event)
        log_dict = event.to_log_dict()
        # structlog reserves "event" for the message
        try:
            if event.severity.value in ("error", "critical"):
                self._logger.error("audit_event", **log_dict)
            elif event.severity.value == "warning":
                self._logger.warning("audit_event", **log_dict)
            elif event.severity.value == "debug":
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception:
            return False
        return True

    async def log_signed_in(self, user_id: str, anonymous: bool) -> None:
        await self.log(AuditEventBuilder.signed_in(user_id=user_id, anonymous=anonymous))

    async def log_sign_in_failed(self, reason: str) -> None:
        await self.log(AuditEventBuilder.sign_in_failed(reason=reason))

    async def log_account_created(
        self,
        user_id: str,
        account_id: str,
        name: str,
        opening_balance: str,
        correlation_id: UUID,
    ) -> None:
        """Log account creation."""
        event = AuditEventBuilder.account_created(
            user_id=user_id,
            account_id=account_id,
            name=name,
            opening_balance=opening_balance,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_account_deleted(
        self,
        user_id: str,
        account_id: str,
        transaction_count: int,
        correlation_id: UUID,
    ) -> None:
        """Log account deletion with its transactions."""
        event = AuditEventBuilder.account_deleted(
            user_id=user_id,
            account_id=account_id,
            transaction_count=transaction_count,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_transaction_saved(
        self,
        user_id: str,
        transaction_id: str,
        transaction_type: str,
        amount: str,
        correlation_id: UUID,
    ) -> None:
        event = AuditEventBuilder.transaction_saved(
            user_id=user_id,
            transaction_id=transaction_id,
            transaction_type=transaction_type,
            amount=amount,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_transfer_recorded(
        self,
        user_id: str,
        source_id: str,
        destination_id: str,
        amount: str,
        correlation_id: UUID,
    ) -> None:
        event = AuditEventBuilder.transfer_recorded(
            user_id=user_id,
            source_id=source_id,
            destination_id=destination_id,
            amount=amount,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_category_renamed(
        self,
        user_id: str,
        category_id: str,
        old_name: str,
        new_name: str,
        correlation_id: UUID,
    ) -> None:
        """Log category rename."""
        event = AuditEventBuilder.category_renamed(
            user_id=user_id,
            category_id=category_id,
            old_name=old_name,
            new_name=new_name,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_category_deleted(
        self,
        user_id: str,
        category_id: str,
        budget_count: int,
        correlation_id: UUID,
    ) -> None:
        event = AuditEventBuilder.category_deleted(
            user_id=user_id,
            category_id=category_id,
            budget_count=budget_count,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_budgets_saved(
        self,
        user_id: str,
        month: str,
        count: int,
        carried_forward: bool,
        correlation_id: UUID,
    ) -> None:
        """Log a budget planner save."""
        event = AuditEventBuilder.budgets_saved(
            user_id=user_id,
            month=month,
            count=count,
            carried_forward=carried_forward,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_records_cleared(
        self,
        user_id: str,
        scope: str,
        deleted_count: int,
        correlation_id: UUID,
    ) -> None:
        event = AuditEventBuilder.records_cleared(
            user_id=user_id,
            scope=scope,
            deleted_count=deleted_count,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_clear_incomplete(
        self,
        user_id: str,
        cleared_account_ids: list[str],
        error_message: str,
        correlation_id: UUID,
    ) -> None:
        """Log a clear that stopped after some commits succeeded."""
        event = AuditEventBuilder.clear_incomplete(
            user_id=user_id,
            cleared_account_ids=cleared_account_ids,
            error_message=error_message,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_external_service_error(
        self,
        service: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log external service error."""
        event = AuditEventBuilder.external_service_error(
            service=service,
            error_message=error_message,
            correlation_id=correlation_id,
        )
        await self.log(event)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., clearing data).
    Pass it through all subsequent operations.
    """
    return uuid4()
