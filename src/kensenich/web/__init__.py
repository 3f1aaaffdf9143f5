"""
KensenichManager - Web API.

FastAPI application exposing the CRUD routers and the assistant endpoints.
"""
