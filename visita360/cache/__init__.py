"""
cache/ — Process-local caches persisted as JSON blobs.

state_store.py holds the blobs (app_state table); geocode_cache.py keeps
address lookups for 24 hours on top of it.
"""
