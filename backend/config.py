"""
Relay server configuration.

All values come from the environment (a local .env is loaded by main.py
before this module is imported). Example .env:
  PORT=3000
  CORS_ORIGINS=http://localhost:5173,https://captions.example.com
  DEFAULT_LANGUAGE=en-US
"""

import os

HOST = os.environ.get("HOST", "0.0.0.0")
PORT = int(os.environ.get("PORT", "3000"))

# Comma-separated; "*" allows any origin
CORS_ORIGINS = [
    origin.strip()
    for origin in os.environ.get("CORS_ORIGINS", "*").split(",")
    if origin.strip()
]

DEFAULT_LANGUAGE = os.environ.get("DEFAULT_LANGUAGE", "en-US")

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

SHUTDOWN_MESSAGE = "Server is shutting down"

# Seconds a single viewer may take to accept a caption before it is skipped
BROADCAST_SEND_TIMEOUT = float(os.environ.get("BROADCAST_SEND_TIMEOUT", "2.0"))
