from .logging_email_delivery_channel import LoggingEmailDeliveryChannel

__all__ = [
    "LoggingEmailDeliveryChannel",
]
