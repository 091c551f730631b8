"""SQLAlchemy credential store."""
