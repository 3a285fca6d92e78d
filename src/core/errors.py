from __future__ import annotations


class UniverseError(Exception):
    pass


class AccountNotFoundError(UniverseError):
    """Raised by account-specific views when the account id is not in the snapshot."""

    def __init__(self, account_id: str):
        super().__init__(f"Unknown account: {account_id}")
        self.account_id = account_id


class InvalidSortSpecError(UniverseError):
    """Raised when a `field:order` sort string cannot be parsed."""


class HolidayConfigError(UniverseError):
    """Raised when a holidays YAML file exists but cannot be read."""
