"""Domain layer - entities, domain services and repository contracts."""
