# Gunicorn configuration for the Job Board API
# Run with: gunicorn -c gunicorn.conf.py app.main:app
import os

# Bind to the port provided by the environment
bind = f"0.0.0.0:{os.getenv('PORT', '3000')}"

# The live-connection registry is per process, so a single worker keeps
# every WebSocket client reachable from every request
workers = 1

# ASGI worker for FastAPI + WebSockets
worker_class = "uvicorn.workers.UvicornWorker"

timeout = 60

# Graceful timeout
graceful_timeout = 30

# Keep alive
keepalive = 5

# Log level
loglevel = "info"

# Access log
accesslog = "-"

# Error log
errorlog = "-"
