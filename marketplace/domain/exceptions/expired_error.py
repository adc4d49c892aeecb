"""
Expiry domain exceptions.
"""


class ExpiredError(Exception):
    """Raised when a time-boxed offer is answered after its deadline."""

    code = "EXPIRED"

    def __init__(self, dispatch_id: object):
        self.dispatch_id = dispatch_id
        super().__init__(f"Dispatch {dispatch_id} has expired")
