"""HTTP layer: route modules and middleware."""
