"""Cross-cutting infrastructure: auth, database, errors, logging, pagination."""
