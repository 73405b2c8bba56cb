"""Follow-up tasks created by tools and proactive handlers."""
