"""FlickHub - movie browsing backend.

Two independent pieces behind one FastAPI app:
- Account service: registration and login against a single `users` table.
- Catalog proxy: forwards category requests to TMDB with a server-held API key,
  so the key never reaches the browser.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
