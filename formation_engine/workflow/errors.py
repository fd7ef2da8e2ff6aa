""" Error types raised while loading workflow and form configuration. """
from typing import List, Optional


class ConfigurationError(ValueError):
    """A workflow or form definition is malformed.

    Every violation found during the load is kept in ``errors`` so the
    operator sees the whole list at once.
    """

    def __init__(self, errors: List[str], kind: str = "workflow"):
        self.errors = list(errors)
        self.kind = kind
        super().__init__(f"Invalid {kind} configuration: {', '.join(self.errors)}")


class FormConfigNotFound(LookupError):
    """ No configuration source exists for a freezone. """

    def __init__(self, freezone_code: Optional[str], key: Optional[str] = None):
        self.freezone_code = freezone_code
        self.key = key
        super().__init__(f"Freezone configuration not found: {freezone_code or '<blank>'}")
