"""HTTP API layer: application factory, dependencies and routes."""
