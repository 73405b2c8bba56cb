"""Trigger handlers — import modules here to register them."""

from advisor.triggers.handlers import calendar, gmail, hubspot  # noqa: F401
