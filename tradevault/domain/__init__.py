"""
Domain model: entities, status machines, cost-basis arithmetic, the
ports adapters implement, and the error hierarchy.

Nothing here imports a framework or performs IO.
"""
