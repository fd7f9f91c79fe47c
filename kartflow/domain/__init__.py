"""
Domain layer - order workflow and cart rules.

This layer holds the little business policy the console encodes itself,
independent of HTTP, templates or the backend client.
"""
