"""ProConnect web frontend.

Server-rendered pages and same-origin proxy routes in front of the
ProConnect backend API.
"""

__version__ = "1.0.0"
