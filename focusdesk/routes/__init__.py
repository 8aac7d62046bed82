"""Per-domain FastAPI routers."""
