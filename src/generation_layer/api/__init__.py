"""HTTP API: routes, request/response models, error handlers, middleware."""
