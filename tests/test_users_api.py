import re

import pytest

from app.models.user import UserRole

REGISTRATION = {
    "firstName": " Grace ",
    "lastName": "Hopper",
    "email": "Grace@Example.com",
    "password": "secret123",
    "skills": ["cobol", " compilers "],
}


def test_register_creates_employee(client):
    response = client.post("/api/users", json=REGISTRATION)
    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "User registered successfully"
    user = body["data"]["user"]
    assert re.match(r"^EMP-\d{4}-0001$", user["employeeId"])
    assert re.match(r"^[0-9a-f]{24}$", user["id"])
    assert user["role"] == "EMPLOYEE"
    assert user["email"] == "grace@example.com"
    assert user["firstName"] == "Grace"
    assert user["skills"] == ["cobol", "compilers"]
    assert user["isActive"] is True
    assert user["isFirstLogin"] is True
    assert "password" not in user


def test_register_duplicate_email_is_case_insensitive(client):
    assert client.post("/api/users", json=REGISTRATION).status_code == 201

    response = client.post("/api/users", json={**REGISTRATION, "email": "GRACE@example.COM"})
    assert response.status_code == 409
    assert response.json() == {
        "status": "fail",
        "code": "CONFLICT",
        "message": "User with this email already exists",
    }


def test_register_cannot_choose_role(client):
    response = client.post("/api/users", json={**REGISTRATION, "role": "ADMIN"})
    assert response.status_code == 422
    assert response.json()["code"] == "VALIDATION_ERROR"
    assert "role" in response.json()["message"]


def test_register_rejects_non_object_body(client):
    response = client.post("/api/users", json=["not", "an", "object"])
    assert response.status_code == 422
    assert response.json()["message"] == "Request body must be a JSON object"


def test_directory_lists_users(client, admin, employee, auth_headers):
    response = client.get("/api/users", headers=auth_headers(employee))
    assert response.status_code == 200
    body = response.json()
    assert body["results"] == 2
    assert {u["email"] for u in body["data"]["users"]} == {admin.email, employee.email}


def test_directory_requires_login(client):
    response = client.get("/api/users")
    assert response.status_code == 401


def test_directory_rejects_query_params(client, employee, auth_headers):
    response = client.get("/api/users?role=ADMIN", headers=auth_headers(employee))
    assert response.status_code == 422
    assert response.json()["message"] == "GET /users does not accept query parameters. Received: role"


def test_get_user_by_id_or_code(client, admin, employee, auth_headers):
    headers = auth_headers(employee)
    by_id = client.get(f"/api/users/{admin.id}", headers=headers)
    by_code = client.get(f"/api/users/{admin.employee_id}", headers=headers)

    assert by_id.status_code == 200
    assert by_id.json() == by_code.json()


def test_get_user_malformed_and_missing(client, employee, auth_headers):
    headers = auth_headers(employee)

    response = client.get("/api/users/not-an-id", headers=headers)
    assert response.status_code == 422
    assert 'Invalid User ID: "not-an-id"' in response.json()["message"]

    response = client.get("/api/users/EMP-1999-0001", headers=headers)
    assert response.status_code == 404
    assert response.json()["code"] == "RESOURCE_NOT_FOUND"


@pytest.mark.parametrize("identifier", ["EMP-2025-0001%0A", "EMP-%D9%A2%D9%A0%D9%A2%D9%A5-0001"])
def test_get_user_rejects_code_lookalikes(client, employee, auth_headers, identifier):
    response = client.get(f"/api/users/{identifier}", headers=auth_headers(employee))
    assert response.status_code == 422
    assert response.json()["code"] == "VALIDATION_ERROR"


def test_update_my_profile(client, employee, auth_headers):
    response = client.patch(
        "/api/users/me",
        json={"phone": "+1 555 0100", "skills": ["python"], "email": "EVE.NEW@example.com"},
        headers=auth_headers(employee),
    )
    assert response.status_code == 200
    user = response.json()["data"]["user"]
    assert user["phone"] == "+1 555 0100"
    assert user["skills"] == ["python"]
    assert user["email"] == "eve.new@example.com"


def test_update_my_profile_rejects_role_even_for_admin(client, admin, employee, auth_headers):
    for user in (employee, admin):
        response = client.patch("/api/users/me", json={"role": "ADMIN"}, headers=auth_headers(user))
        assert response.status_code == 422
        assert "role" in response.json()["message"]
    assert employee.role == UserRole.EMPLOYEE


def test_update_my_profile_email_taken(client, admin, employee, auth_headers):
    response = client.patch("/api/users/me", json={"email": "ADMIN@example.com"}, headers=auth_headers(employee))
    assert response.status_code == 409


def test_update_my_profile_requires_fields(client, employee, auth_headers):
    response = client.patch("/api/users/me", json={}, headers=auth_headers(employee))
    assert response.status_code == 422


def test_update_other_user_forbidden_for_employee(client, admin, employee, auth_headers):
    response = client.patch(f"/api/users/{admin.employee_id}", json={"firstName": "X"}, headers=auth_headers(employee))
    assert response.status_code == 403
    assert response.json()["code"] == "FORBIDDEN"


def test_update_self_by_id_is_limited_to_profile_fields(client, employee, auth_headers):
    headers = auth_headers(employee)

    response = client.patch(f"/api/users/{employee.id}", json={"designation": "CTO"}, headers=headers)
    assert response.status_code == 422

    response = client.patch(f"/api/users/{employee.employee_id}", json={"lastName": "Engineer"}, headers=headers)
    assert response.status_code == 200
    assert response.json()["data"]["user"]["fullName"] == "Eve Engineer"


def test_admin_updates_user_by_code(client, admin, employee, auth_headers):
    response = client.patch(
        f"/api/users/{employee.employee_id}",
        json={"designation": "Engineer", "manager": admin.employee_id},
        headers=auth_headers(admin),
    )
    assert response.status_code == 200
    user = response.json()["data"]["user"]
    assert user["designation"] == "Engineer"
    assert user["manager"]["id"] == admin.id
    assert user["manager"]["employeeId"] == admin.employee_id
