"""Domain layer for taskr: pure models, invariants and errors (no I/O)."""
