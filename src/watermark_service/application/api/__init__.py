"""API routers, request/response models and dependencies."""
