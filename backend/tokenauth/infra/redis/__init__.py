"""Redis credential store."""
