"""HTTP layer: FastAPI app, envelopes, validation and routes."""
