class RepositoryError(Exception):
    """Base class for errors raised by the repository layer itself."""


class UnknownFieldError(RepositoryError, AttributeError):
    def __init__(self, entity: str, field: str):
        self.entity = entity
        self.field = field
        super().__init__(f"{entity} has no column '{field}'")


class UnknownRelationError(RepositoryError, AttributeError):
    """Raised when an eager-load path names a relationship the model lacks."""

    def __init__(self, entity: str, relation: str):
        self.entity = entity
        self.relation = relation
        super().__init__(f"{entity} has no relationship '{relation}'")


class RepositoryBindingError(RepositoryError, TypeError):
    def __init__(self, interface: object, message: str):
        self.interface = interface
        super().__init__(f"Cannot bind {interface!r}: {message}")


class RepositoryNotBoundError(RepositoryError, LookupError):
    """Raised when resolving an interface nothing has been bound to."""

    def __init__(self, interface: type):
        self.interface = interface
        name = getattr(interface, "__qualname__", repr(interface))
        super().__init__(f"No repository bound to interface {name}")


__all__ = [
    "RepositoryError",
    "UnknownFieldError",
    "UnknownRelationError",
    "RepositoryBindingError",
    "RepositoryNotBoundError",
]
