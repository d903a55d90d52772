"""FastAPI surface: routers, dependencies and pydantic schemas."""
