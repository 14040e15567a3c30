"""suppliers/ -- Supplier domain model and persistence.

Layer rule: suppliers/ imports only stdlib + third-party libraries and core/.
It does NOT import from api/ or auth/.
api/ imports from suppliers/, not the other way around.
"""
