"""HTTP API — registration endpoints, health and metrics."""
