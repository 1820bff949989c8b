from fastapi import HTTPException, status


class NotFoundError(HTTPException):
    def __init__(self, detail: str = "Not found."):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class AlreadyCheckedInError(HTTPException):
    def __init__(self, detail: str = "You've already checked in today. Come back tomorrow!"):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class CheckInConflictError(HTTPException):
    def __init__(self, detail: str = "Could not complete check-in. Please try again."):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class ChallengeCompletedError(HTTPException):
    def __init__(self, detail: str = "This challenge is already complete."):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class ChallengeArchivedError(HTTPException):
    def __init__(self, detail: str = "Archived challenges can't be checked in."):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class FreeLimitExceededError(HTTPException):
    def __init__(self, limit: int):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Free accounts can run {limit} challenges at a time. Upgrade to Pro for unlimited challenges.",
        )


class InvalidUsernameError(HTTPException):
    def __init__(self, detail: str = "Username must be 3-20 characters, letters and numbers only"):
        super().__init__(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=detail)


class UsernameTakenError(HTTPException):
    def __init__(self, detail: str = "That username is already taken."):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)
