"""Coach Digital - WhatsApp coaching backend

Components:
    memory/: Memory note extraction, storage and processing
    messaging/: Conversation log and phone verification
    dashboard/backend/: FastAPI application for the web app
"""

__version__ = "0.1.0"
