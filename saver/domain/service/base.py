"""Base service class for domain services."""


class Service:
    """Base class for domain services.

    Services hold the identity and linking rules that span several
    entities: users, linked-account edges, verification codes.
    """

    pass
