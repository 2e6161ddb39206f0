class JobBoardError(Exception):
    """Base class for expected, user-visible failures."""

    default_message = "Request failed."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class UnauthenticatedError(JobBoardError):
    default_message = "Not authenticated."


class ForbiddenError(JobBoardError):
    default_message = "Insufficient permissions."


class UserNotFoundError(UnauthenticatedError):
    default_message = "User not found."


class JobNotFoundError(JobBoardError):
    default_message = "Job not found."


class AlreadyAppliedError(JobBoardError):
    default_message = "You have already applied to this job."


class DuplicateEmailError(JobBoardError):
    default_message = "Email already registered."


class InvalidCredentialsError(JobBoardError):
    default_message = "Invalid credentials."

