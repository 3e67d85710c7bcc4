"""
Service Layer

- client: signing, transport, pagination
- sync: orchestration of backup / restore / clear
- domains: per-domain platform adapters
- auth_service: credential provider / session manager
- archive: JSON file import and export
- backup_service: entry points for the HTTP layer
"""
