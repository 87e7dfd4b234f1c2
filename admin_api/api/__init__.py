"""HTTP layer: Flask blueprints, error handlers and request hooks."""
