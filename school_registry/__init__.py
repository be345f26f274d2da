"""
Top-level package for the School Registry.

A TCP service that keeps schools, classes, teachers and students in a
consistent relationship graph.  The server lives in ``app``; a small
asyncio client is available in ``client``.
"""

__all__ = []
