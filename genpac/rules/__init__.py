"""Rule compilation core.

Nothing in this package touches configuration, the network, files or the web
layer. Callers hand in rule lines that are already in memory.
"""
