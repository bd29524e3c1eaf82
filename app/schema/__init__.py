"""ORM tables and API models."""
