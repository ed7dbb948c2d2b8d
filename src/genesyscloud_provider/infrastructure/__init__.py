"""Infrastructure layer: resilience, logging, registry and exporter support."""
