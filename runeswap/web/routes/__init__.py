"""API routers, one module per upstream service."""
