"""
Domain layer: entities, value objects, exceptions and service interfaces.
"""
