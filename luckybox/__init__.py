"""Number-matching lottery settlement engine."""
