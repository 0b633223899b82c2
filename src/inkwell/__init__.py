"""inkwell — personal blog back end over a hosted document store."""

__version__ = "0.1.0"
