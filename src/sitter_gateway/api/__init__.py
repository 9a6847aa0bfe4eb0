"""FastAPI routes for the sitter gateway."""
