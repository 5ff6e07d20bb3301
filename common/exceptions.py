"""
Error kinds shared across apps and the DRF handler that renders them.

    ValidationFailed    -> 400 (bad email, duplicate email/login, short password)
    NotAuthorized       -> 403 (policy denial)
    NoLinkedIdentity    -> 422 (dispatch without a matching provider identity)
    ProviderCallFailed  -> 502 (non-success response from a third-party API)
"""
from typing import Any, Optional

from rest_framework import exceptions, status
from rest_framework.views import exception_handler


class ValidationFailed(exceptions.ValidationError):
    default_code = "validation_failed"


class NotAuthorized(exceptions.PermissionDenied):
    default_detail = "You are not allowed to perform this action."
    default_code = "not_authorized"


class NoLinkedIdentity(exceptions.APIException):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_detail = "No linked identity for this provider."
    default_code = "no_linked_identity"

    def __init__(self, provider: str, detail: Optional[str] = None):
        self.provider = provider
        super().__init__(detail or f"No linked {provider} identity.")


class ProviderCallFailed(exceptions.APIException):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = "Provider call failed."
    default_code = "provider_call_failed"

    def __init__(self, provider: str, detail: Optional[str] = None,
                 status_code: Optional[int] = None, payload: Any = None):
        self.provider = provider
        self.provider_status = status_code
        # raw provider body (parsed JSON when possible, text otherwise)
        self.payload = payload
        super().__init__(detail or f"{provider} call failed")


def custom_exception_handler(exc, context):
    """
    Attach status code and a machine-friendly error field to responses.
    Provider failures also carry the provider's raw response for diagnosis.
    """
    response = exception_handler(exc, context)
    if response is not None:
        if isinstance(response.data, dict):
            response.data.setdefault("status_code", response.status_code)
            if "detail" in response.data:
                response.data["error"] = str(response.data["detail"])
        if isinstance(exc, ProviderCallFailed):
            response.data["provider"] = exc.provider
            response.data["provider_status"] = exc.provider_status
            response.data["provider_response"] = exc.payload
        elif isinstance(exc, NoLinkedIdentity):
            response.data["provider"] = exc.provider
    return response
