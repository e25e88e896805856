"""Course and student registry backed by MongoDB."""
