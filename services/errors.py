class AssistantError(Exception):
    """Base error; status_code is what the HTTP layer answers with"""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

class InvalidRequest(AssistantError):
    status_code = 400

class NotFound(AssistantError):
    status_code = 404

class DownstreamUnavailable(AssistantError):
    """Database or language model could not be reached"""
    status_code = 500

class QueryExecutionFailed(AssistantError):
    """A generated or corrected SQL statement did not execute.

    Recovered inside the assistant into a fallback answer, never sent to clients.
    """

    def __init__(self, message: str, sql: str):
        super().__init__(message)
        self.sql = sql
