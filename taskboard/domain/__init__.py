"""Domain layer: entities, enums and the exception taxonomy."""
