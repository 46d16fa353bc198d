"""Document template commands."""
