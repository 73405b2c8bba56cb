"""Retrieval: embedding storage, document ingestion and context assembly."""
