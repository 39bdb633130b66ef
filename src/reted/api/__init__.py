"""HTTP API consumed by the front end."""
