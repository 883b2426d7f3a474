"""Notifications: outbound message value objects and ports."""
