from typing import Mapping

from app.models.project import ProjectStatus
from app.validators.common import check_choice, check_non_empty_search, reject_unknown_query_params

STATUS_VALUES = [status.value for status in ProjectStatus]

PROJECT_LIST_QUERY_PARAMS = ("status", "search")


def validate_project_list_query(params: Mapping[str, str]) -> None:
    reject_unknown_query_params(params, PROJECT_LIST_QUERY_PARAMS)
    status = params.get("status")
    if status:
        check_choice(status, STATUS_VALUES, "status")
    check_non_empty_search(params)
