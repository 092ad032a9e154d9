"""
Serverless entry point: the platform mounts this module at /api/chat and
serves its ASGI ``app``. Configuration comes from the environment.
"""

from main import app  # noqa: F401
