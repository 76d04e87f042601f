"""
HTTP status API for the cartwatch agent (FastAPI).

Run with main.py, which serves create_app() under uvicorn.
"""

from cartwatch.api_server.server import StatusResponse, create_app

__all__ = ["StatusResponse", "create_app"]
