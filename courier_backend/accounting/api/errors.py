# accounting/api/errors.py

"""
PATH: accounting/api/errors.py

SERVICE ERROR -> HTTP RESPONSE

Every AccountingServiceError carries a stable `code`; views return
{"detail": <message>, "code": <code>} with the mapped status.
"""

from rest_framework import status
from rest_framework.response import Response

from accounting.services.exceptions import AccountingServiceError, ErrorCode

STATUS_BY_CODE = {
    ErrorCode.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorCode.UNBALANCED_ENTRY: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_LINE: status.HTTP_400_BAD_REQUEST,
    ErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.DUPLICATE_CODE: status.HTTP_409_CONFLICT,
    ErrorCode.ALREADY_INITIALIZED: status.HTTP_409_CONFLICT,
    ErrorCode.ALREADY_POSTED: status.HTTP_409_CONFLICT,
    ErrorCode.REFERENCED: status.HTTP_409_CONFLICT,
}


def error_response(exc: AccountingServiceError) -> Response:
    code = ErrorCode(exc.code)
    return Response(
        {"detail": str(exc), "code": code.value},
        status=STATUS_BY_CODE.get(code, status.HTTP_400_BAD_REQUEST),
    )


def forbidden(message: str) -> Response:
    return Response({"detail": message}, status=status.HTTP_403_FORBIDDEN)
