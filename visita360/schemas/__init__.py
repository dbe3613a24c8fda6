"""
schemas/ — Pydantic request models for the Visita360 API

Provides input validation, auto-generated OpenAPI docs, and
consistent error messages across all endpoints.
"""
