"""Error taxonomy shared by the post, draft, and store layers."""


class InkwellError(Exception):
    """Base class for every error the CLI reports as a user-facing message."""


class ValidationError(InkwellError):
    """Required form input (title/content) is missing."""


class StoreError(InkwellError):
    """The document store rejected or failed a request."""


class PersistenceError(InkwellError):
    """An insert, update, or delete could not be persisted."""


class RetrievalError(InkwellError):
    """A read against the document store failed."""


class CorruptDraftError(InkwellError):
    """A draft's content does not decode to a post form."""


class ConfigError(InkwellError):
    """Configuration values from TOML, env vars, or flags are invalid."""
