# Services package init
"""
ProgressLog Backend — Services Layer
======================================

What:  Business logic between routes (HTTP) and the database.

Service Inventory:
    - record_defaults: pure defaulting rules (unit from frequency, timestamp, kind)
    - RecordService: the five record operations, one SQL statement each
"""
