from typing import Any, Dict, Optional


def success(data: Optional[Dict[str, Any]] = None, message: Optional[str] = None, **extra: Any) -> Dict[str, Any]:
    """Build the {"status": "success", ...} envelope shared by every endpoint."""
    body: Dict[str, Any] = {"status": "success"}
    if message:
        body["message"] = message
    body.update(extra)
    if data is not None:
        body["data"] = data
    return body
