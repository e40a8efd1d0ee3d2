"""Web application package for the countdown GIF service.

Provides the Flask app in web_server.py. Run it with:
    python -m web.web_server
"""

__all__ = ["web_server"]
