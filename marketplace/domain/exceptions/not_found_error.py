"""
Lookup domain exceptions.
"""


class NotFoundError(Exception):
    """Raised when a referenced record does not exist (or is archived)."""

    code = "NOT_FOUND"

    def __init__(self, entity: str, identifier: object):
        self.entity = entity
        self.identifier = identifier
        super().__init__(f"{entity} {identifier} not found")
