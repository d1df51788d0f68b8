"""Coach Journal Backend - HTTP API for the coaching journal.

This package provides a hexagonal architecture wrapper around the
``coaching`` core package.

Layers:
- application: Use cases and port interfaces
- infrastructure: Adapters and the composition root
- api: REST and WebSocket endpoints
"""

__version__ = "2.0.0"
