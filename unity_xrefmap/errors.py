"""Exception types shared across the pipeline."""


class XRefMapError(Exception):
    """Base class for all unity-xrefmap errors."""


class SetupError(XRefMapError):
    """The run cannot start: the tool or the source repository is unavailable."""


class ConfigError(SetupError):
    """The configuration file is unreadable or contains unknown keys."""


class MetadataError(XRefMapError):
    """A ManagedReference document does not have the shape its marker promises."""

    def __init__(self, path, message: str):
        self.path = path
        super().__init__(f"{path}: {message}")


class CheckoutError(XRefMapError):
    """A release branch could not be checked out; only that version is lost."""

    def __init__(self, branch: str, message: str):
        self.branch = branch
        super().__init__(f"Cannot check out {branch}: {message}")
