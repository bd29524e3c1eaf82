"""Natural-language command engine for instructors."""
