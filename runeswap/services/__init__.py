"""Domain services composed by the route handlers."""
