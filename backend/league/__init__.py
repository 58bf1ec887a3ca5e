"""League scoring and pod engine."""
