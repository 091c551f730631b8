"""Cross-service building blocks: errors, base service, ports."""
