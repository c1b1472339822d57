from __future__ import annotations


class LLMError(RuntimeError):
    def __init__(self, message: str, *, code: str = "llm_unavailable"):
        super().__init__(message)
        self.code = code


class ProviderFormatError(LLMError):
    """Provider answered, but the payload is not usable JSON for the requested schema."""

    def __init__(self, message: str, *, code: str = "llm_invalid"):
        super().__init__(message, code=code)


class ResumeParseError(ValueError):
    pass


class WorkspaceNotFoundError(LookupError):
    pass


class ItemNotFoundError(LookupError):
    pass
