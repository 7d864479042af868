"""
Domain errors raised by the service layer.

All errors derive from ``ValueError`` so callers that only care about
"the request was invalid" can keep catching that.  Endpoints translate
each class to an HTTP status.  A similar-category match is not an error
and is therefore not defined here (see
``services.category_service.SimilarCategoryWarning``).
"""


class ProDirectoryError(ValueError):
    """Base class for domain errors."""


class InvalidAccountState(ProDirectoryError):
    """The stored account violates an invariant (e.g. no primary category)."""


class InvalidCategory(ProDirectoryError):
    """A category name is blank."""


class DuplicateCategory(ProDirectoryError):
    """The category is already the primary or an additional category."""

    def __init__(self, category: str):
        super().__init__(f"Service category '{category}' is already listed on this account")
        self.category = category


class CannotRemovePrimary(ProDirectoryError):
    """Attempt to remove the permanent primary category."""

    def __init__(self, category: str):
        super().__init__(
            f"Cannot remove primary service category '{category}'; only additional services can be removed"
        )
        self.category = category


class CategoryNotFound(ProDirectoryError):
    """The category to remove is not an additional category of the account."""

    def __init__(self, category: str):
        super().__init__(f"Service category '{category}' is not an additional service of this account")
        self.category = category


class AccountNotFound(ProDirectoryError):
    def __init__(self, account_id: int):
        super().__init__(f"Account {account_id} not found")
        self.account_id = account_id


class DuplicateAccount(ProDirectoryError):
    def __init__(self, username: str):
        super().__init__(f"An account with username '{username}' already exists")
        self.username = username


class ConcurrentModification(ProDirectoryError):
    """The account changed between read and write."""
