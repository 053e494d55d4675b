"""
Top-level package for the token URI resolution service.

The service exposes a FastAPI app (see `main.py`) with:

- GET /health
- GET /tokens/{token_id}/uri
- PUT/DELETE endpoints for per-token URI configuration
- GET/PUT /contract-metadata
"""
