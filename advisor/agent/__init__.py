"""Conversation agent and proactive entry point."""
