"""Cross-cutting application plumbing."""
