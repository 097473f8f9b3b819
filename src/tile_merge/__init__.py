"""Rules engine for a sliding-tile merge puzzle (2048-style)."""
