from __future__ import annotations


class OrebotError(Exception):
    """Base class for errors raised by the bot."""


class AccountDecodeError(OrebotError):
    """Raw account bytes are malformed or the account is not initialized yet."""


class ConfigError(OrebotError, ValueError):
    """A configuration value was rejected at the boundary."""


class SubmissionRejected(OrebotError):
    """The ledger refused a transaction; the message carries the RPC error text."""
