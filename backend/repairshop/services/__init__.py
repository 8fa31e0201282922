# Services package init
"""
Repair Shop Backend — Services Layer
=====================================

What:  Business logic layer sitting between routes (HTTP) and the database.
How:   Services receive the request's AsyncSession plus plain dicts, enforce
       the rule sets, run their queries and return response schemas. They
       flush but never commit.

Service Inventory:
    - PhoneOwnerService (base): parent/child phone protocol
    - CustomerService:  customers + customer_telephones
    - EmployeeService:  employees + employee_phones, password hashing
    - ProductService:   products, optional image upload
    - FileService:      image validation, storage, resolution and cleanup
"""
