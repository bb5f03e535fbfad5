from kairos.libs.result import Error


class ProviderScopeError(RuntimeError):
    """A client component was looked up outside the KairosProvider scope"""


class OrganizationContextError(Exception):
    """Write-path failure of the organization context"""

    def __init__(self, base_error: Error):
        self.base_error = base_error
        super().__init__(base_error.message)


class AuthorizationError(OrganizationContextError):
    """Caller lacks the role an operation requires"""

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(Error("FORBIDDEN", message))
