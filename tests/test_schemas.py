from datetime import date

import pytest
from pydantic import ValidationError as SchemaError

from app.core.errors import BAD_REQUEST_ERROR_TYPE, ValidationError, first_error_message
from app.models.project import ProjectStatus
from app.models.user import UserRole
from app.schemas.auth import ChangePasswordIn, LoginIn
from app.schemas.project import ProjectCreate, ProjectUpdate
from app.schemas.user import (
    AdminUserCreate, ProfileUpdate, RegistrationIn, ResetPasswordIn, StatusIn, UserUpdate,
)
from app.validators.common import reject_query_params, reject_unknown_fields
from app.validators.projects import validate_project_list_query
from app.validators.users import validate_user_list_query

VALID_REGISTRATION = {
    "firstName": "Grace",
    "lastName": "Hopper",
    "email": "grace@example.com",
    "password": "secret123",
}


def first_error(model, body):
    with pytest.raises(SchemaError) as excinfo:
        model.model_validate(body)
    return excinfo.value.errors()[0]


def test_registration_accepts_minimal_body():
    payload = RegistrationIn.model_validate(VALID_REGISTRATION).to_payload()
    assert payload == VALID_REGISTRATION


def test_registration_strips_names_and_phone():
    body = {**VALID_REGISTRATION, "firstName": " Grace ", "phone": "+1 555 0100\n"}
    registration = RegistrationIn.model_validate(body)
    assert registration.first_name == "Grace"
    assert registration.phone == "+1 555 0100"


def test_unknown_fields_list_the_allowed_set_sorted():
    error = first_error(RegistrationIn, {**VALID_REGISTRATION, "role": "ADMIN"})
    assert error["type"] == "extra_forbidden"
    assert error["msg"] == (
        "Request body does not accept the following field(s): role. "
        "Allowed fields: email, firstName, lastName, password, phone, skills"
    )


def test_unknown_field_wins_over_other_errors():
    error = first_error(RegistrationIn, {"nickname": "x", "email": "bad"})
    assert error["type"] == "extra_forbidden"
    assert "nickname" in error["msg"]


def test_snake_case_keys_are_unknown():
    error = first_error(RegistrationIn, {**VALID_REGISTRATION, "first_name": "Grace"})
    assert error["type"] == "extra_forbidden"


@pytest.mark.parametrize(
    "body, field",
    [
        ({**VALID_REGISTRATION, "firstName": "  "}, "firstName"),
        ({**VALID_REGISTRATION, "email": "not-an-email"}, "email"),
        ({**VALID_REGISTRATION, "email": "grace@example.com\nbcc@example.com"}, "email"),
        ({**VALID_REGISTRATION, "password": "123"}, "password"),
        ({**VALID_REGISTRATION, "phone": "call me"}, "phone"),
        ({**VALID_REGISTRATION, "phone": "٥٥٥ 0100"}, "phone"),
        ({**VALID_REGISTRATION, "skills": "python"}, "skills"),
        ({**VALID_REGISTRATION, "skills": ["python", ""]}, "skills"),
    ],
)
def test_registration_field_rules(body, field):
    assert first_error(RegistrationIn, body)["loc"][0] == field


def test_registration_requires_an_object():
    error = first_error(RegistrationIn, ["not", "an", "object"])
    assert error["msg"] == "Request body must be a JSON object"


@pytest.mark.parametrize(
    "extra, field",
    [
        ({"role": "OWNER"}, "role"),
        ({"manager": "boss"}, "manager"),
        ({"currentProject": "EMP-2025-0001"}, "currentProject"),
        ({"currentProject": "PROJ-CRM-001\n"}, "currentProject"),
        ({"totalExperience": -1}, "totalExperience"),
        ({"totalExperience": True}, "totalExperience"),
        ({"totalExperience": "3"}, "totalExperience"),
        ({"totalExperience": float("nan")}, "totalExperience"),
        ({"totalExperience": float("inf")}, "totalExperience"),
        ({"dateOfJoining": "yesterday"}, "dateOfJoining"),
    ],
)
def test_create_user_field_rules(extra, field):
    assert first_error(AdminUserCreate, {**VALID_REGISTRATION, **extra})["loc"][0] == field


def test_malformed_reference_names_the_expected_format():
    error = first_error(AdminUserCreate, {**VALID_REGISTRATION, "manager": "boss"})
    assert error["msg"].startswith('Invalid identifier "boss".')
    assert "EMP-YYYY-XXXX" in error["msg"]


def test_create_user_accepts_references_by_code():
    body = {**VALID_REGISTRATION, "role": "MANAGER", "manager": "EMP-2024-0001",
            "currentProject": "PROJ-CRM-001", "totalExperience": 3, "dateOfJoining": "2024-02-01T09:00:00Z"}
    payload = AdminUserCreate.model_validate(body).to_payload()
    assert payload["role"] == UserRole.MANAGER
    assert payload["dateOfJoining"] == date(2024, 2, 1)
    assert payload["totalExperience"] == 3.0


def test_profile_update_rejects_admin_fields_and_empty_body():
    assert "role" in first_error(ProfileUpdate, {"role": "ADMIN"})["msg"]
    assert first_error(ProfileUpdate, {})["msg"] == "Request body must contain at least one field"


def test_profile_update_rejects_null_names():
    assert first_error(ProfileUpdate, {"firstName": None})["loc"] == ("firstName",)


def test_user_update_payload_holds_only_sent_fields():
    payload = UserUpdate.model_validate({"manager": None, "isActive": False}).to_payload()
    assert payload == {"manager": None, "isActive": False}


def test_allow_list_uses_the_same_message():
    with pytest.raises(ValidationError) as excinfo:
        reject_unknown_fields({"designation": "CTO"}, {"phone", "email"})
    assert excinfo.value.message == (
        "Request body does not accept the following field(s): designation. Allowed fields: email, phone"
    )


def test_status_and_reset_password_bodies():
    assert first_error(StatusIn, {"isActive": "false"})["loc"] == ("isActive",)
    assert first_error(StatusIn, {})["loc"] == ("isActive",)
    assert first_error(ResetPasswordIn, {"newPassword": "abc"})["loc"] == ("newPassword",)


def test_project_rules():
    assert first_error(ProjectCreate, {"description": "no name"})["loc"] == ("name",)
    assert first_error(ProjectCreate, {"name": "Apollo", "status": "DONE"})["loc"] == ("status",)
    error = first_error(ProjectCreate, {"name": "Apollo", "startDate": "2025-05-01", "endDate": "2025-04-01"})
    assert error["msg"] == "endDate cannot be earlier than startDate"
    assert first_error(ProjectUpdate, {"name": " "})["loc"] == ("name",)
    assert first_error(ProjectUpdate, {"status": None})["loc"] == ("status",)


def test_project_update_parses_dates_and_status():
    payload = ProjectUpdate.model_validate({"status": "COMPLETED", "endDate": "2025-03-04"}).to_payload()
    assert payload == {"status": ProjectStatus.COMPLETED, "endDate": date(2025, 3, 4)}


def test_login_and_change_password_errors_are_bad_requests():
    error = first_error(LoginIn, {"email": "a@example.com"})
    assert error["type"] == BAD_REQUEST_ERROR_TYPE
    assert error["msg"] == "Email and password are required"

    error = first_error(ChangePasswordIn, {"currentPassword": "secret123"})
    assert error["type"] == BAD_REQUEST_ERROR_TYPE
    assert error["msg"] == "Current password and new password are required"

    error = first_error(ChangePasswordIn, {"currentPassword": "secret123", "newPassword": "abc"})
    assert error["type"] == BAD_REQUEST_ERROR_TYPE
    assert error["msg"].startswith("newPassword:")


def test_login_unknown_field_stays_a_validation_error():
    error = first_error(LoginIn, {"email": "a@example.com", "password": "x", "remember": True})
    assert error["type"] == "extra_forbidden"
    assert error["msg"].endswith("Allowed fields: email, password")


def test_first_error_message_prefixes_the_field():
    with pytest.raises(SchemaError) as excinfo:
        AdminUserCreate.model_validate({**VALID_REGISTRATION, "totalExperience": -1})
    errors = [{**error, "loc": ("body", *error["loc"])} for error in excinfo.value.errors()]
    assert first_error_message(errors).startswith("totalExperience: ")
    assert first_error_message([]) == "Invalid request"
    assert first_error_message([{"type": "missing", "loc": ("body",), "msg": "Field required"}]) == (
        "Request body must be a JSON object"
    )


def test_user_list_query():
    validate_user_list_query({"role": "ADMIN", "isActive": "TRUE", "search": "ada"})
    with pytest.raises(ValidationError, match='Invalid isActive value: "yes"'):
        validate_user_list_query({"isActive": "yes"})
    with pytest.raises(ValidationError, match="Search parameter must be a non-empty string"):
        validate_user_list_query({"search": "  "})


def test_unknown_query_params_list_the_allowed_set_sorted():
    with pytest.raises(ValidationError) as excinfo:
        validate_user_list_query({"page": "2"})
    assert excinfo.value.message == (
        "Invalid query parameter(s): page. Allowed parameters are: isActive, role, search"
    )
    with pytest.raises(ValidationError) as excinfo:
        validate_project_list_query({"sort": "name"})
    assert excinfo.value.message.endswith("Allowed parameters are: search, status")
    with pytest.raises(ValidationError, match='Invalid status value: "DONE"'):
        validate_project_list_query({"status": "DONE"})


def test_reject_query_params():
    reject_query_params({}, "GET /users")
    with pytest.raises(ValidationError, match="GET /users does not accept query parameters"):
        reject_query_params({"role": "ADMIN"}, "GET /users")
