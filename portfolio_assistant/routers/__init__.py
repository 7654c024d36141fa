"""API Routers."""
