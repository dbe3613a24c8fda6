"""
services/ — Business logic. Routers and the scheduler call into here;
nothing in services/ imports FastAPI.
"""
