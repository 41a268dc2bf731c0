"""FastAPI integration for reskit."""
