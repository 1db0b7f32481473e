"""Service layer — template index, template engine, insertion.

Services may import from domain and infrastructure layers.
They must never import from commands or output.
"""
