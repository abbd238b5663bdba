"""Outbound services."""

from catalog.services.mailer import Mailer

__all__ = ["Mailer"]
