"""Domain layer: models, ports, contracts and errors."""
