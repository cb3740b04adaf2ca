"""geosolar core: models, sources, services and the ambient stack."""
