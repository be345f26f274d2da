"""
Protocol layer: the method table (``router``) and the per-connection
request loop (``connection``).
"""
