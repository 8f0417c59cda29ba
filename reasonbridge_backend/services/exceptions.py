"""Domain errors raised by ReasonBridge services and mapped to HTTP errors by the routers."""


class NotFoundError(Exception):
    """A referenced record does not exist."""


class PropositionNotFoundError(NotFoundError):
    def __init__(self, proposition_id):
        super().__init__(f"Proposition with ID {proposition_id} not found")
        self.proposition_id = proposition_id


class AlignmentNotFoundError(NotFoundError):
    def __init__(self, proposition_id, user_id):
        super().__init__("Alignment not found")
        self.proposition_id = proposition_id
        self.user_id = user_id


class ResponseNotFoundError(NotFoundError):
    def __init__(self, response_id):
        super().__init__(f"Response with ID {response_id} not found")
        self.response_id = response_id


class FeedbackNotFoundError(NotFoundError):
    def __init__(self, feedback_id):
        super().__init__(f"Feedback with ID {feedback_id} not found")
        self.feedback_id = feedback_id


class ConflictError(Exception):
    """The request conflicts with the current state of a record."""


class FeedbackAlreadyDismissedError(ConflictError):
    def __init__(self, feedback_id):
        super().__init__("Feedback already dismissed")
        self.feedback_id = feedback_id


class InvalidAlignmentError(ValueError):
    """Alignment input violates a domain rule (e.g. NUANCED without explanation)."""


class AnalysisFailedError(Exception):
    """A content analyzer raised while analysing a response."""

    def __init__(self, analyzer_name: str, cause: Exception):
        super().__init__(f"{analyzer_name} failed: {cause}")
        self.analyzer_name = analyzer_name
        self.cause = cause
