# Routes package init
"""
ProgressLog Backend — API Routes Package
==========================================

Route Inventory:
    - records.py: GET    /api/records
                  POST   /api/records
                  PUT    /api/records/{id}
                  DELETE /api/records/{id}
                  POST   /api/records/{id}/like
    - health.py:  GET    /health

Routes stay thin: extract path/body, call RecordService, wrap the result.
"""
