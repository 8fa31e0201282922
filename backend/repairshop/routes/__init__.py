# Routes package init
"""
Repair Shop Backend — API Routes Package
=========================================

What:  HTTP route handlers that accept requests and return responses.
How:   One module per resource; each handler pulls data from the request,
       calls its service and picks the status code.

Route Inventory:
    - customers.py:  /api/customers/...   (register, update, patch, delete, reads)
    - employees.py:  /api/employees/...   (register, update, delete, reads)
    - products.py:   /api/products/...    (multipart create/update, delete, reads)
    - uploads.py:    GET /uploads/{path}  (stored product images)
    - health.py:     GET /health          (service health check)

Routes stay thin: validation and persistence live in the services.
"""
