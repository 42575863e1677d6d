"""
JSON envelope and wire schemas for an HTTP layer in front of the store.
"""
