"""Web API for the coaching app

Components:
    backend/main.py: FastAPI application
    backend/routes/: API route handlers
"""
