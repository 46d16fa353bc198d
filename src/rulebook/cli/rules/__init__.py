"""Rule document commands."""
