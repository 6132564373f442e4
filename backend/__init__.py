"""
Equipment rental backend: Flask REST API with admin and client accounts.

Use backend.app.create_app() to build the application.
"""

__version__ = "1.0.0"
