"""
Service domains. Each package owns its store and references the entities of
the others by ID only.
"""
