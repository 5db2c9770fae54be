"""Domain layer: snapshot value objects, name filters and exceptions."""
