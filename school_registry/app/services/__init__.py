"""
Service layer.

``store`` is the only module that talks to SQLite; ``enrollment_service``
holds the domain rules and depends on a store handed to it.
"""
