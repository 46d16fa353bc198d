"""rulebook core library: document parsing, validation, templates."""
