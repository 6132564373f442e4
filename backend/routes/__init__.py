"""Route blueprints for the rental API."""
