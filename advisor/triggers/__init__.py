"""Event-source triggers: ingest external events and act on them."""
