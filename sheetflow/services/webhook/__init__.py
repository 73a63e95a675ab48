"""Webhook delivery service."""

from .client import DeliveryResult, WebhookClient

__all__ = ["DeliveryResult", "WebhookClient"]
