"""auth/ -- Identity, credential and token package for the supplier API.

Layer rule: auth/ imports only stdlib + third-party libraries and core/.
It does NOT import from api/ or suppliers/.
api/ imports from auth/, not the other way around.
"""
