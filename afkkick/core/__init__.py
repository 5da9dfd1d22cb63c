"""Core primitives shared by the plugin, the event runner and the API (server events).

Kept free of FastAPI and Redis concerns so it can be reused by tests and tools.
"""
