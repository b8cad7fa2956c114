from typing import List, Optional


class PipelineCRMError(Exception):
    """Base class for all scoring and matching domain exceptions.

    Every custom exception in this module inherits from here so that a
    single ``except PipelineCRMError`` clause can catch any domain
    error.
    """

    def __init__(self, detail: str = "An error occurred"):
        self.detail = detail
        super().__init__(detail)


class LeadNotFoundError(PipelineCRMError):
    """Raised when a requested lead does not exist."""

    def __init__(self, detail: str = "Lead not found"):
        super().__init__(detail)


class PropertyNotFoundError(PipelineCRMError):
    """Raised when a requested property does not exist."""

    def __init__(self, detail: str = "Property not found"):
        super().__init__(detail)


class PropertyMatchNotFoundError(PipelineCRMError):
    """Raised when a lead–property link does not exist."""

    def __init__(self, detail: str = "Property match not found"):
        super().__init__(detail)


class DuplicatePropertyMatchError(PipelineCRMError):
    """Raised when a property is already attached to the lead."""

    def __init__(self, detail: str = "Property already attached to lead"):
        super().__init__(detail)


class InvalidScoringConfigError(PipelineCRMError):
    """Raised when a scoring configuration fails validation on save.

    ``errors`` carries one message per problem so the admin screen can
    show them all at once.  The previously saved configuration stays in
    effect.
    """

    def __init__(
        self,
        detail: str = "Invalid scoring configuration",
        errors: Optional[List[str]] = None,
    ):
        self.errors = errors or []
        super().__init__(detail)


class ScoringConfigUnavailableError(PipelineCRMError):
    """Raised when the scoring configuration cannot be read.

    Fatal for a bulk recompute: the run aborts before any lead is
    touched.
    """

    def __init__(self, detail: str = "Scoring configuration unavailable"):
        super().__init__(detail)


class InvalidLeadFilterError(PipelineCRMError):
    """Raised when lead listing filters contradict each other."""

    def __init__(self, detail: str = "Invalid lead filter"):
        super().__init__(detail)


class PropertyComparisonLimitError(PipelineCRMError):
    """Raised when too many properties are requested for comparison."""

    def __init__(self, detail: str = "Too many properties to compare"):
        super().__init__(detail)
