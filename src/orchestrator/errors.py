"""
src/orchestrator/errors.py

Errors raised by the AI service, provider clients and tool dispatch.
"""


class AIServiceError(Exception):
    """Base class; the message is what the user sees."""


class MissingAPIKeyError(AIServiceError):

    def __init__(self):

        super().__init__("An API key is required for the selected provider.")


class MissingModelSelectionError(AIServiceError):

    def __init__(self):

        super().__init__("Select a model before requesting a response.")


class MissingToolArgumentError(AIServiceError):

    def __init__(self, name: str):

        self.name = name
        super().__init__(f"Missing required argument: {name}.")


class UnknownToolError(AIServiceError):

    def __init__(self, name: str):

        self.name = name
        super().__init__(f"Unknown tool: {name}.")


class UnreachableEndpointError(AIServiceError):

    def __init__(self, target: str):

        self.target = target
        super().__init__(f"Unable to contact {target}. Verify the address and your network connection.")


class InvalidResponseError(AIServiceError):

    def __init__(self, detail: str = "The provider returned an unexpected response."):

        super().__init__(detail)


class EmptyResponseError(AIServiceError):

    def __init__(self):

        super().__init__("The provider response did not include any content.")


class InvalidHostError(AIServiceError):

    def __init__(self, host: str):

        self.host = host
        super().__init__(f"Unable to build Ollama URL for host {host}.")
