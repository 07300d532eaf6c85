"""HTTP surface for the connector (command endpoint, health, error handlers)."""
