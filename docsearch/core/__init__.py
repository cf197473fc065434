"""Domain core: models, protocols, query layer and services."""
