"""Infrastructure adapters (database, legacy record translation)."""
