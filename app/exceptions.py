"""
Domain error taxonomy for quiz integrity and submission control

Every error carries a stable ``code`` (the error kind), the HTTP status it
maps to, and a human-readable message. The app-level exception handler in
``app.main`` renders them with the same envelope as HTTP errors.
"""


class QuizIntegrityError(Exception):
    """Base class for all domain errors surfaced to the caller"""

    code = "quiz_integrity_error"
    status_code = 400
    default_message = "Request could not be processed"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(QuizIntegrityError):
    code = "unauthenticated"
    status_code = 401
    default_message = "Authentication required"


class Unauthorized(QuizIntegrityError):
    code = "unauthorized"
    status_code = 403
    default_message = "You are not allowed to perform this action"


class UnknownTopic(QuizIntegrityError):
    code = "unknown_topic"
    status_code = 404
    default_message = "Unknown quiz topic"


class AlreadyCompleted(QuizIntegrityError):
    code = "already_completed"
    status_code = 409
    default_message = "Quiz already completed. No retakes allowed."


class AlreadySubmitted(AlreadyCompleted):
    code = "already_submitted"
    default_message = "Your group has already submitted an assignment"


class GroupMembershipConflict(QuizIntegrityError):
    code = "group_membership_conflict"
    status_code = 409
    default_message = "Subject already belongs to another group"


class RequestInProgress(QuizIntegrityError):
    code = "request_in_progress"
    status_code = 409
    default_message = "Another request for this quiz is being processed. Please retry."


class SessionNotFound(QuizIntegrityError):
    code = "session_not_found"
    status_code = 404
    default_message = "Quiz session not found"


class SessionExpired(QuizIntegrityError):
    code = "session_expired"
    status_code = 410
    default_message = "Quiz session has expired"


class InvalidAnswer(QuizIntegrityError):
    code = "invalid_answer"
    default_message = "Invalid answers submitted"


class QuestionsNotFound(QuizIntegrityError):
    code = "questions_not_found"
    default_message = "Quiz questions not found"


class NoGroupAssigned(QuizIntegrityError):
    code = "no_group_assigned"
    default_message = "You are not assigned to a group"


class InvalidFile(QuizIntegrityError):
    code = "invalid_file"
    default_message = "Only PDF files are allowed"


class FileTooLarge(QuizIntegrityError):
    code = "file_too_large"
    status_code = 413
    default_message = "File size must be less than 10MB"


class InvalidScore(QuizIntegrityError):
    code = "invalid_score"
    default_message = "Score must be a number between 0 and 100"


class SubmissionNotFound(QuizIntegrityError):
    code = "submission_not_found"
    status_code = 404
    default_message = "Submission not found"


class StorageFailure(QuizIntegrityError):
    code = "storage_failure"
    status_code = 502
    default_message = "Failed to upload file to storage"
