"""HTTP layer: Flask application, controllers and interceptors."""
