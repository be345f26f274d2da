"""
Pydantic schema definitions.

Each entity (schools, persons, classes) has its own module holding the
stored record, the request payload and the response shape.  The wire
envelope and the method table keys live in ``protocol``.
"""
