"""Exceptions raised by test collections and the test registry."""

from pidgeonpulse.domain.errors import PidgeonPulseError


class CollectionError(PidgeonPulseError):
    """Base class for test collection errors."""


class DuplicateTestError(CollectionError):
    """Raised when the same test unit is added to a collection twice.

    Attributes:
        collection_name (str): The collection the unit was added to.
        test_name (str): The name of the offending unit.
    """

    def __init__(self, collection_name: str, test_name: str) -> None:
        super().__init__(
            f"Test '{test_name}' is already part of collection '{collection_name}'."
        )
        self.collection_name = collection_name
        self.test_name = test_name


class RegistryError(PidgeonPulseError):
    """Base class for test registry errors."""


class CollectionNotFound(RegistryError, LookupError):
    """Raised when no collection is registered under the requested name."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Test collection '{name}' not found.")
        self.name = name


class DuplicateCollectionError(RegistryError):
    """Raised when a collection name is registered twice."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Test collection '{name}' is already registered.")
        self.name = name
