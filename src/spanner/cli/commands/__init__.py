"""Top-level spanner commands (auto-discovered)."""
