"""auth/ -- Authentication and authorization package for Catchdex.

Layer rule: auth/ imports only stdlib, third-party libraries, and core/.
It does NOT import from api/ or dex/.
api/ and dex/ import from auth/, not the other way around.
"""
