"""Change-notification pipeline errors."""

from __future__ import annotations


class SubscriptionConfigError(ValueError):
    """Raised synchronously when a pipeline is configured with unusable input."""

    @classmethod
    def missing_feed_client(cls) -> SubscriptionConfigError:
        """Return an error when no feed client is supplied."""
        return cls("A notification feed client is required")

    @classmethod
    def missing_service(cls) -> SubscriptionConfigError:
        """Return an error when a poll service is built without a service."""
        return cls("A change notification service is required")

    @classmethod
    def blank_resource_name(cls) -> SubscriptionConfigError:
        """Return an error for an empty resource name."""
        return cls("Resource name must be non-blank")

    @classmethod
    def blank_version(cls, resource_name: str) -> SubscriptionConfigError:
        """Return an error for an empty override version."""
        return cls(f"Override version for {resource_name!r} must be non-blank")

    @classmethod
    def invalid_polling_interval(cls, raw: object) -> SubscriptionConfigError:
        """Return an error for a polling interval that is not a positive number."""
        return cls(f"Polling interval must be a positive number, got: {raw!r}")


class SubscriberHandlerError(RuntimeError):
    """Wraps an exception raised by a subscriber's notification handler.

    Delivered to the failing subscriber's ``on_error`` only; the pipeline
    carries on with the remaining subscribers and notifications.
    """

    def __init__(self, message: str, *, notification_ids: tuple[str, ...] = ()) -> None:
        """Initialise with a message and the ids of the undelivered notifications."""
        self.notification_ids = notification_ids
        super().__init__(message)

    @classmethod
    def handler_failed(
        cls, notification_ids: tuple[str, ...]
    ) -> SubscriberHandlerError:
        """Return the error handed to a subscriber whose handler raised."""
        noun = "notification" if len(notification_ids) == 1 else "notifications"
        return cls(
            f"An error occurred while a subscriber processed {noun} "
            f"{', '.join(notification_ids) or '(none)'}",
            notification_ids=notification_ids,
        )
