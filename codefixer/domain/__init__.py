"""Domain Layer: value objects, result models, errors and the interfaces (ports)
that the infrastructure layer implements.
"""
