"""Repository implementations: in-memory tables and a JSON file store."""
