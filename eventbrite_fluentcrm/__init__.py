"""Receive Eventbrite webhooks and sync attendees into FluentCRM."""

__version__ = "1.0.0"
