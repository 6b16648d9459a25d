"""auth/ -- Authentication and authorization package for Taskboard.

Layer rule: auth/ does NOT import from api/ or tracker/. Import from core/
is allowed -- core/ is the kernel layer (auth/store.py uses core.db).
api/ imports from auth/, not the other way around.
"""
