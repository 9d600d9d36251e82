"""Package registry clients."""
