"""Flask routes for the identity service."""
