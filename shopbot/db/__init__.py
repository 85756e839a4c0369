"""
Persistence: database, session store.
"""
