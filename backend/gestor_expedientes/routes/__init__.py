# Routes package init
"""
Gestor de Expedientes Backend: API Routes Package
==================================================

Route Inventory:
    - cases.py:   /api/cases (list, search, create, read, update, delete)
    - health.py:  GET /health (service health check)

Routes are thin: extract request data, call CaseService, shape the response.
"""
