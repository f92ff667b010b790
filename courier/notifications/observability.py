"""Structured log events for change-notification pipeline runs.

``PipelineEventLogger`` writes one bracketed event tag per line followed by
``key=value`` fields, so log aggregators can filter on the event type.

Usage
-----
>>> event_logger = PipelineEventLogger()
>>> context = PipelineRunContext(mode="item", started_at=utcnow())
>>> event_logger.log_run_started(context, subscriber_count=2)

"""

from __future__ import annotations

import dataclasses
import enum
import typing as typ

from courier.logging import get_logger, log_error, log_info, log_warning
from courier.proxy.errors import (
    ProxyAPIError,
    ProxyConfigError,
    ProxyResponseShapeError,
)

from .errors import SubscriptionConfigError

if typ.TYPE_CHECKING:
    import datetime as dt

logger = get_logger(__name__)

# HTTP status code threshold for server errors (5xx)
_HTTP_SERVER_ERROR_THRESHOLD = 500


class PipelineEventType(enum.StrEnum):
    """Structured log event types for pipeline observability."""

    RUN_STARTED = "notifications.run.started"
    CYCLE_COMPLETED = "notifications.cycle.completed"
    SUBSCRIBER_FAILED = "notifications.subscriber.failed"
    RUN_COMPLETED = "notifications.run.completed"
    RUN_FAILED = "notifications.run.failed"


class ErrorCategory(enum.StrEnum):
    """Categories for error classification in alerts."""

    TRANSIENT = "transient"
    CLIENT_ERROR = "client_error"
    SCHEMA_DRIFT = "schema_drift"
    CONFIGURATION = "configuration"
    UNKNOWN = "unknown"


@dataclasses.dataclass(frozen=True, slots=True)
class PipelineRunContext:
    """Shared context for one pipeline run."""

    mode: str
    started_at: dt.datetime


_EXCEPTION_CATEGORY_MAP: tuple[tuple[type[BaseException], ErrorCategory], ...] = (
    (ProxyResponseShapeError, ErrorCategory.SCHEMA_DRIFT),
    (ProxyConfigError, ErrorCategory.CONFIGURATION),
    (SubscriptionConfigError, ErrorCategory.CONFIGURATION),
)


def categorize_error(exc: BaseException) -> ErrorCategory:
    """Categorize an exception for alerting purposes.

    Returns:
        ErrorCategory indicating the type of failure for alert routing.

    """
    # Network failures carry no status code and are worth retrying later
    if isinstance(exc, ProxyAPIError):
        if (
            exc.status_code is None
            or exc.status_code >= _HTTP_SERVER_ERROR_THRESHOLD
        ):
            return ErrorCategory.TRANSIENT
        return ErrorCategory.CLIENT_ERROR

    for exc_type, category in _EXCEPTION_CATEGORY_MAP:
        if isinstance(exc, exc_type):
            return category

    return ErrorCategory.UNKNOWN


class PipelineEventLogger:
    """Emit structured pipeline events via femtologging.

    Events are emitted at INFO for run and cycle progress, WARN when a
    subscriber handler fails, and ERROR when a run ends with an exception.
    """

    def log_run_started(
        self, context: PipelineRunContext, *, subscriber_count: int
    ) -> None:
        """Log pipeline run start."""
        log_info(
            logger,
            "[%s] mode=%s subscribers=%d started_at=%s",
            PipelineEventType.RUN_STARTED,
            context.mode,
            subscriber_count,
            context.started_at.isoformat(),
        )

    def log_cycle_completed(
        self,
        context: PipelineRunContext,
        *,
        cycle: int,
        notifications: int,
        subscribers: int,
        remaining: int,
    ) -> None:
        """Log one poll/distribute cycle."""
        log_info(
            logger,
            "[%s] mode=%s cycle=%d notifications=%d subscribers=%d remaining=%d",
            PipelineEventType.CYCLE_COMPLETED,
            context.mode,
            cycle,
            notifications,
            subscribers,
            remaining,
        )

    def log_subscriber_failed(
        self,
        context: PipelineRunContext,
        *,
        subscriber: object,
        handler: str,
        error: BaseException,
    ) -> None:
        """Log a subscriber handler that raised, with its traceback."""
        log_warning(
            logger,
            "[%s] mode=%s subscriber=%s handler=%s error_type=%s error_message=%s",
            PipelineEventType.SUBSCRIBER_FAILED,
            context.mode,
            type(subscriber).__name__,
            handler,
            type(error).__name__,
            str(error),
            exc_info=error,
        )

    def log_run_completed(
        self,
        context: PipelineRunContext,
        *,
        cycles: int,
        cancelled: bool,
        duration: dt.timedelta,
    ) -> None:
        """Log a run that ended by cancellation or by losing its subscribers."""
        log_info(
            logger,
            "[%s] mode=%s cycles=%d cancelled=%s duration_seconds=%.3f",
            PipelineEventType.RUN_COMPLETED,
            context.mode,
            cycles,
            cancelled,
            duration.total_seconds(),
        )

    def log_run_failed(
        self,
        context: PipelineRunContext,
        *,
        cycles: int,
        error: BaseException,
        duration: dt.timedelta,
    ) -> None:
        """Log a run ended by a fetch or reconciliation error."""
        category = categorize_error(error)
        log_error(
            logger,
            "[%s] mode=%s cycles=%d duration_seconds=%.3f "
            "error_type=%s error_category=%s error_message=%s",
            PipelineEventType.RUN_FAILED,
            context.mode,
            cycles,
            duration.total_seconds(),
            type(error).__name__,
            category,
            str(error),
            exc_info=error,
        )
