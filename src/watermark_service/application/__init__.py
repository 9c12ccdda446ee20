"""HTTP surface: FastAPI app, routes, dependency wiring."""
