"""SQLite persistence: engine, ORM rows and repository."""
