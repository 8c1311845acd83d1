"""lists/ -- Todo-list domain model and persistence.

Layer rule: lists/ imports only stdlib + third-party libraries.
It does NOT import from api/, web/, auth/, or core/.
"""
