"""dex/ -- The ownership-scoped creature collection.

Layer rule: dex/ imports from core/ and auth.models only. It does NOT
import from api/.
"""
