"""
Ошибки backend-сервиса.

Сервисы бросают подклассы HelpdeskError; обработчики в app.py превращают их
в конверт {"status": "Error", ...} с нужным HTTP-кодом.
"""

from typing import Optional


class HelpdeskError(Exception):
    status_code = 500
    code = "Internal"
    message = "Internal server error"

    def __init__(self, detail: Optional[str] = None) -> None:
        self.detail = detail
        super().__init__(self.report)

    @property
    def report(self) -> str:
        if self.detail:
            return f"{self.message}: {self.detail}"
        return self.message


# === 400 ===


class ValidationFailed(HelpdeskError):
    status_code = 400
    code = "Validation"
    message = "Request validation failed"


class CommandRelatedItemNotFound(HelpdeskError):
    status_code = 400
    code = "CommandRelatedItemNotFound"
    message = "An item referenced by the command does not exist"


class UploadPolicyViolated(HelpdeskError):
    status_code = 400
    code = "PolicyViolated"
    message = "The file does not satisfy the upload policy"


class UploadStateError(HelpdeskError):
    status_code = 400

    def __init__(self, code: str, message: str, detail: Optional[str] = None) -> None:
        self.code = code
        self.message = message
        super().__init__(detail)


# === 401 ===


class NoCookie(HelpdeskError):
    status_code = 401
    code = "NoCookie"
    message = "No session cookie, log in first"


class InvalidToken(HelpdeskError):
    status_code = 401
    code = "InvalidToken"
    message = "Session token is invalid or expired"


class AuthenticatedUserNotFound(HelpdeskError):
    status_code = 401
    code = "AuthenticatedUserNotFound"
    message = "The authenticated user does not exist"


class InvalidAuthData(HelpdeskError):
    status_code = 401
    code = "InvalidAuthData"
    message = "Login data is invalid or expired"


# === 403 / 404 / 409 ===


class Forbidden(HelpdeskError):
    status_code = 403
    code = "Forbidden"
    message = "You are not allowed to perform this action"


class NotFound(HelpdeskError):
    status_code = 404
    code = "NotFound"
    message = "The requested object was not found"


class RouteNotFound(HelpdeskError):
    status_code = 404
    code = "RouteNotFound"
    message = "No such route"


class AlreadyExists(HelpdeskError):
    status_code = 409
    code = "AlreadyExists"
    message = "An object with this id already exists"


class IdentityExists(HelpdeskError):
    status_code = 409
    code = "IdentityExists"
    message = "The user already has an identity of this kind"


class IdentityUsed(HelpdeskError):
    status_code = 409
    code = "IdentityUsed"
    message = "The identity is already used by another user"


# === 500 ===


class ViewRelatedItemNotFound(HelpdeskError):
    status_code = 500
    code = "ViewRelatedItemNotFound"
    message = "An item referenced by the view does not exist"


class LoginOptionNotAvailable(HelpdeskError):
    status_code = 500
    code = "LoginOptionNotAvailable"
    message = "This login option is not configured on the server"
