"""Single-task evaluation."""
