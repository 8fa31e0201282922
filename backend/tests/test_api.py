"""
Repair Shop Backend — API Endpoint Tests
=========================================

What:  End-to-end HTTP tests through the FastAPI app with HTTPX.
How:   test_client routes requests in-process (ASGITransport) and every
       request commits through the real session dependency into the
       per-test in-memory SQLite database.

What we test:
    ✅ Customer registration and read-back (phones as a list)
    ✅ Duplicate email, empty PATCH, future dob error bodies
    ✅ Delete removes the customer and its phone rows
    ✅ A failure after the parent insert leaves no parent row
    ✅ A failed commit is answered with 500 and leaves nothing behind
    ✅ Email conflicts ignore letter case; a non-integer id is not found
    ✅ Product multipart create with image, image serving, traversal refusal
    ✅ Error envelope and X-Request-ID header
    ✅ Health check
"""

from datetime import date, timedelta
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from repairshop.models.customer import Customer, CustomerTelephone

AMAL = {
    "firstName": "Amal",
    "lastName": "Perera",
    "email": "amal@x.com",
    "customerType": "Regular",
    "phoneNumbers": ["0711111111"],
}

NIMAL = {
    "firstName": "Nimal",
    "lastName": "Silva",
    "email": "nimal@repairshop.lk",
    "mobileno": ["0771234567"],
    "nic": "901234567V",
    "role": "employee",
    "username": "nimals",
    "password": "secret1",
    "dob": "1990-05-17",
}


async def count(session_factory, model, *where):
    async with session_factory() as session:
        stmt = select(func.count()).select_from(model)
        if where:
            stmt = stmt.where(*where)
        return (await session.execute(stmt)).scalar_one()


class TestCustomerEndpoints:
    @pytest.mark.asyncio
    async def test_register_then_get(self, test_client):
        response = await test_client.post("/api/customers/register", json=AMAL)

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Customer registered successfully!"

        response = await test_client.get(f"/api/customers/{body['customerId']}")
        assert response.status_code == 200
        customer = response.json()
        assert customer["firstName"] == "Amal"
        assert customer["type"] == "Regular"
        assert customer["phoneNumbers"] == ["0711111111"]

    @pytest.mark.asyncio
    async def test_duplicate_email(self, test_client):
        await test_client.post("/api/customers/register", json=AMAL)

        response = await test_client.post(
            "/api/customers/register", json={**AMAL, "phoneNumbers": ["0722222222"]}
        )

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "conflict"
        assert body["message"] == "Email already exists"

    @pytest.mark.asyncio
    async def test_email_in_other_case_is_a_duplicate(self, test_client, session_factory):
        await test_client.post("/api/customers/register", json=AMAL)

        response = await test_client.post(
            "/api/customers/register",
            json={**AMAL, "email": "AMAL@x.com", "phoneNumbers": ["0722222222"]},
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Email already exists"
        assert await count(session_factory, Customer) == 1

    @pytest.mark.asyncio
    async def test_failed_commit_is_reported(self, test_client):
        failing_commit = AsyncMock(side_effect=OperationalError("COMMIT", {}, Exception("lost")))

        with patch("sqlalchemy.ext.asyncio.AsyncSession.commit", failing_commit):
            response = await test_client.post("/api/customers/register", json=AMAL)

        assert response.status_code == 500
        assert response.json()["error"] == "server_error"
        failing_commit.assert_awaited_once()
        assert (await test_client.get("/api/customers/all")).json() == []

    @pytest.mark.asyncio
    async def test_duplicate_phone_creates_no_customer(self, test_client, session_factory):
        await test_client.post("/api/customers/register", json=AMAL)

        response = await test_client.post(
            "/api/customers/register", json={**AMAL, "email": "other@x.com"}
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Phone number 0711111111 already exists"
        assert await count(session_factory, Customer) == 1

    @pytest.mark.asyncio
    async def test_validation_error_lists_fields(self, test_client):
        response = await test_client.post(
            "/api/customers/register", json={**AMAL, "firstName": "", "customerType": "Gold"}
        )

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "validation_error"
        assert body["errors"] == [
            {"field": "firstName", "message": "First name is mandatory"},
            {"field": "firstName", "message": "First name should only contain letters and ' symbol"},
            {"field": "customerType", "message": "Customer type should be either 'Regular' or 'Normal'"},
        ]
        assert body["request_id"]

    @pytest.mark.asyncio
    async def test_patch_empty_body(self, test_client):
        response = await test_client.patch("/api/customers/1", json={})

        assert response.status_code == 400
        assert response.json()["message"] == "No valid fields provided for update"

    @pytest.mark.asyncio
    async def test_patch_then_read(self, test_client):
        customer_id = (await test_client.post("/api/customers/register", json=AMAL)).json()["customerId"]

        response = await test_client.patch(f"/api/customers/{customer_id}", json={"customerType": "Premium"})

        assert response.status_code == 200
        assert response.json() == {"message": "Customer updated successfully!"}
        assert (await test_client.get(f"/api/customers/{customer_id}")).json()["type"] == "Premium"

    @pytest.mark.asyncio
    async def test_full_update_replaces_phones(self, test_client):
        customer_id = (
            await test_client.post(
                "/api/customers/register", json={**AMAL, "phoneNumbers": ["0711111111", "0722222222"]}
            )
        ).json()["customerId"]

        response = await test_client.put(
            f"/api/customers/{customer_id}",
            json={**AMAL, "customerType": "Premium", "phoneNumbers": ["0733333333"]},
        )

        assert response.status_code == 200
        customer = (await test_client.get(f"/api/customers/{customer_id}")).json()
        assert customer["phoneNumbers"] == ["0733333333"]
        assert customer["type"] == "Premium"

    @pytest.mark.asyncio
    async def test_put_missing_customer(self, test_client):
        response = await test_client.put("/api/customers/999", json={"firstName": "Kamal"})

        assert response.status_code == 404
        assert response.json()["message"] == "Customer not found"

    @pytest.mark.asyncio
    async def test_delete_removes_phone_rows(self, test_client, session_factory):
        customer_id = (
            await test_client.post(
                "/api/customers/register", json={**AMAL, "phoneNumbers": ["0711111111", "0722222222"]}
            )
        ).json()["customerId"]

        response = await test_client.delete(f"/api/customers/{customer_id}")

        assert response.status_code == 200
        assert response.json() == {"message": "Customer deleted successfully!"}
        response = await test_client.get(f"/api/customers/{customer_id}")
        assert response.status_code == 404
        assert response.json()["message"] == "Customer not found"
        assert await count(
            session_factory, CustomerTelephone, CustomerTelephone.customer_id == customer_id
        ) == 0

    @pytest.mark.asyncio
    async def test_list_and_lookup_by_phone(self, test_client):
        await test_client.post("/api/customers/register", json={**AMAL, "phoneNumbers": []})
        await test_client.post(
            "/api/customers/register", json={**AMAL, "email": "b@x.com", "phoneNumbers": ["0744444444"]}
        )

        customers = (await test_client.get("/api/customers/all")).json()
        assert [c["phoneNumbers"] for c in customers] == [[], ["0744444444"]]

        response = await test_client.get("/api/customers/phone/0744444444")
        assert response.status_code == 200
        assert response.json()["email"] == "b@x.com"

        response = await test_client.get("/api/customers/phone/0700000000")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_failure_after_parent_insert_rolls_back(self, test_client, session_factory):
        failing_insert = AsyncMock(side_effect=OperationalError("INSERT", {}, Exception("lost")))

        with patch(
            "repairshop.services.customer_service.CustomerService._insert_phones", failing_insert
        ):
            response = await test_client.post("/api/customers/register", json=AMAL)

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "server_error"
        assert "lost" not in body["message"]
        failing_insert.assert_awaited_once()
        assert await count(session_factory, Customer) == 0

    @pytest.mark.asyncio
    async def test_non_integer_id_is_not_found(self, test_client):
        response = await test_client.get("/api/customers/abc")

        assert response.status_code == 404
        body = response.json()
        assert body["error"] == "not_found"
        assert body["message"] == "Customer not found"

        response = await test_client.put("/api/products/abc", data={"model": "BX2"})
        assert response.status_code == 404
        assert response.json()["message"] == "Product not found"


class TestEmployeeEndpoints:
    @pytest.mark.asyncio
    async def test_register_and_read_without_password(self, test_client):
        response = await test_client.post("/api/employees/register", json=NIMAL)

        assert response.status_code == 201
        employee_id = response.json()["employeeId"]

        employee = (await test_client.get(f"/api/employees/{employee_id}")).json()
        assert employee["username"] == "nimals"
        assert employee["phoneNumbers"] == ["0771234567"]
        assert "password" not in employee

        employees = (await test_client.get("/api/employees/all")).json()
        assert all("password" not in e for e in employees)

    @pytest.mark.asyncio
    async def test_future_dob(self, test_client):
        tomorrow = (date.today() + timedelta(days=1)).isoformat()

        response = await test_client.post("/api/employees/register", json={**NIMAL, "dob": tomorrow})

        assert response.status_code == 400
        assert {"field": "dob", "message": "Date of birth cannot be a future date"} in response.json()["errors"]

    @pytest.mark.asyncio
    async def test_update_and_delete(self, test_client):
        employee_id = (await test_client.post("/api/employees/register", json=NIMAL)).json()["employeeId"]

        response = await test_client.put(
            f"/api/employees/{employee_id}",
            json={"firstName": "Kamal", "role": "owner", "mobileno": ["0799999999"]},
        )
        assert response.status_code == 200
        assert response.json() == {"message": "Employee updated successfully!"}

        employee = (await test_client.get(f"/api/employees/{employee_id}")).json()
        assert employee["first_name"] == "Kamal"
        assert employee["phoneNumbers"] == ["0799999999"]

        response = await test_client.delete(f"/api/employees/{employee_id}")
        assert response.json() == {"message": "Employee deleted successfully!"}
        assert (await test_client.get(f"/api/employees/{employee_id}")).status_code == 404


class TestProductEndpoints:
    @pytest.mark.asyncio
    async def test_create_with_image_and_serve_it(self, test_client, sample_image_bytes):
        response = await test_client.post(
            "/api/products/add",
            data={"productName": "Blender", "model": "BX", "modelNo": "BX200"},
            files={"productImage": ("front.png", sample_image_bytes, "image/png")},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Product added successfully!"

        product = (await test_client.get(f"/api/products/{body['productId']}")).json()
        image_path = product["product_image"]
        assert image_path.startswith("/uploads/productImage_")

        served = await test_client.get(image_path)
        assert served.status_code == 200
        assert served.content == sample_image_bytes

        served = await test_client.get("/api/products" + image_path)
        assert served.status_code == 200

    @pytest.mark.asyncio
    async def test_create_rejects_bad_image_type(self, test_client):
        response = await test_client.post(
            "/api/products/add",
            data={"productName": "Blender", "model": "BX", "modelNo": "BX200"},
            files={"productImage": ("manual.pdf", b"%PDF-1.4", "application/pdf")},
        )

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "productImage"

    @pytest.mark.asyncio
    async def test_failed_commit_leaves_no_image(self, test_client, temp_storage, sample_image_bytes):
        failing_commit = AsyncMock(side_effect=OperationalError("COMMIT", {}, Exception("lost")))

        with patch("sqlalchemy.ext.asyncio.AsyncSession.commit", failing_commit):
            response = await test_client.post(
                "/api/products/add",
                data={"productName": "Blender", "model": "BX", "modelNo": "BX200"},
                files={"productImage": ("front.png", sample_image_bytes, "image/png")},
            )

        assert response.status_code == 500
        assert list(Path(temp_storage).iterdir()) == []
        assert (await test_client.get("/api/products/all")).json() == []

    @pytest.mark.asyncio
    async def test_put_missing_product_with_empty_form(self, test_client):
        response = await test_client.put("/api/products/999", data={})

        assert response.status_code == 404
        assert response.json()["message"] == "Product not found"

    @pytest.mark.asyncio
    async def test_update_and_list(self, test_client):
        product_id = (
            await test_client.post(
                "/api/products/add", data={"productName": "Blender", "model": "BX", "modelNo": "BX200"}
            )
        ).json()["productId"]

        response = await test_client.put(f"/api/products/{product_id}", data={"model": "BX2"})
        assert response.status_code == 200
        assert response.json() == {"message": "Product updated successfully!"}

        products = (await test_client.get("/api/products/all")).json()
        assert products[0]["model"] == "BX2"
        assert products[0]["model_no"] == "BX200"

    @pytest.mark.asyncio
    async def test_update_with_nothing_to_write(self, test_client):
        product_id = (
            await test_client.post(
                "/api/products/add", data={"productName": "Blender", "model": "BX", "modelNo": "BX200"}
            )
        ).json()["productId"]

        response = await test_client.put(f"/api/products/{product_id}", data={"model": ""})

        assert response.status_code == 400
        assert response.json()["message"] == "No valid fields provided for update"

    @pytest.mark.asyncio
    async def test_delete_and_missing(self, test_client):
        product_id = (
            await test_client.post(
                "/api/products/add", data={"productName": "Blender", "model": "BX", "modelNo": "BX200"}
            )
        ).json()["productId"]

        assert (await test_client.delete(f"/api/products/{product_id}")).status_code == 200
        response = await test_client.get(f"/api/products/{product_id}")
        assert response.status_code == 404
        assert response.json()["message"] == "Product not found"

    @pytest.mark.asyncio
    async def test_traversal_refused(self, test_client):
        response = await test_client.get("/uploads/..%2Fsecret.txt")

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid file path"

    @pytest.mark.asyncio
    async def test_missing_upload(self, test_client):
        response = await test_client.get("/uploads/productImage_missing.png")

        assert response.status_code == 404


class TestCrossCutting:
    @pytest.mark.asyncio
    async def test_request_id_echoed(self, test_client):
        response = await test_client.get("/api/customers/999", headers={"X-Request-ID": "abc12345"})

        assert response.headers["X-Request-ID"] == "abc12345"
        assert response.json()["request_id"] == "abc12345"

    @pytest.mark.asyncio
    async def test_request_id_generated(self, test_client):
        response = await test_client.get("/api/customers/all")

        assert len(response.headers["X-Request-ID"]) == 8

    @pytest.mark.asyncio
    async def test_health(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"
        assert body["version"]
