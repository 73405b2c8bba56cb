"""Advisor agent: retrieval-augmented assistant over email, calendar and CRM data."""
