# Middleware package init
"""
ProgressLog Backend — Middleware Package
==========================================

Middleware Chain (order matters):
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID first, so every later log line can carry it
    2. Logging measures everything below it, including error handlers
    3. CORS is FastAPI's CORSMiddleware (handles preflight)
"""
