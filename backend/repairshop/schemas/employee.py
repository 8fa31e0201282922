"""
Repair Shop Backend — Employee Request/Response Schemas
========================================================

What:  API contract for /api/employees.

Phone numbers travel as ``mobileno`` on employee requests. The response
never includes the password column.
"""

from datetime import date
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class EmployeeRegisterRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    firstName: Any = Field(default=None, examples=["Nimal"])
    lastName: Any = Field(default=None, examples=["Silva"])
    email: Any = Field(default=None, examples=["nimal@repairshop.lk"])
    mobileno: Any = Field(default=None, examples=[["0771234567"]])
    nic: Any = Field(default=None, examples=["901234567V"])
    role: Any = Field(default=None, examples=["employee"])
    username: Any = Field(default=None, examples=["nimals"])
    password: Any = Field(default=None, examples=["s3cret!"])
    dob: Any = Field(default=None, examples=["1990-05-17"])


class EmployeeUpdateRequest(BaseModel):
    """PUT body; nic, username and password are not updatable here."""
    model_config = ConfigDict(extra="ignore")

    firstName: Any = Field(default=None)
    lastName: Any = Field(default=None)
    email: Any = Field(default=None)
    role: Any = Field(default=None)
    mobileno: Any = Field(default=None)
    dob: Any = Field(default=None)


class EmployeeResponse(BaseModel):
    employee_id: int = Field(description="Generated employee identity")
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    nic: Optional[str] = None
    role: Optional[str] = None
    username: Optional[str] = None
    dob: Optional[date] = None
    phoneNumbers: List[str] = Field(default_factory=list, description="Phone numbers, never null")


class EmployeeRegisteredResponse(BaseModel):
    message: str = Field(default="Employee registered successfully!")
    employeeId: int = Field(description="Identity of the new employee")
