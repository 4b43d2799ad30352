"""
Domain errors raised by the services
Each carries the HTTP status the API answers with
"""


class JobBoardError(Exception):
    """Base error; the message is shown to the caller as-is"""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(JobBoardError):
    status_code = 400


class Unauthenticated(JobBoardError):
    status_code = 401


class Forbidden(JobBoardError):
    status_code = 403


class NotFound(JobBoardError):
    status_code = 404


class Conflict(JobBoardError):
    # Duplicate application / decided application, answered as a bad request
    status_code = 400


class InternalError(JobBoardError):
    status_code = 500


class InvalidSession(Exception):
    """Session token is malformed, badly signed or expired"""
