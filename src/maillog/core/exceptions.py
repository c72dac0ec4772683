"""Custom exceptions for maillog."""


class MaillogError(Exception):
    """Base exception for all maillog errors."""

    pass


class DatabaseError(MaillogError):
    """Database operation failed."""

    pass


class ConfigurationError(MaillogError):
    """Required configuration is missing or invalid."""

    pass


class MigrationError(MaillogError):
    """Migration failed."""

    def __init__(self, message: str, version: int):
        """Initialize exception with the version being migrated to.

        Args:
            message: Human-readable failure message.
            version: Version the failed migration upgrades to.
        """
        self.version = version
        super().__init__(message)


class MigrationConfigurationError(MigrationError):
    """No migration step is registered for a version."""

    def __init__(self, version: int):
        super().__init__(f"Unable to find migration to version {version}.", version)


class MigrationOrderError(MigrationConfigurationError):
    """A step was asked to run from the wrong schema version."""

    def __init__(self, current: int, version: int):
        self.current = current
        MigrationError.__init__(
            self,
            f"Unable to complete migration to version {version}. "
            f"Error: schema is at version {current}, expected {version - 1}.",
            version,
        )


class ExternalOperationError(MigrationError):
    """The schema-altering operation reported a failure."""

    def __init__(self, native_error: str, version: int):
        """Initialize exception with the driver's own error text.

        Args:
            native_error: Error message exactly as reported by the database.
            version: Version the failed migration upgrades to.
        """
        self.native_error = native_error
        super().__init__(
            f"Unable to complete migration to version {version}. Error: {native_error}",
            version,
        )


class ConcurrentMigrationError(MigrationError):
    """Schema version changed while a migration was running."""

    def __init__(self, expected: int, version: int):
        self.expected = expected
        super().__init__(
            f"Unable to complete migration to version {version}. "
            f"Error: schema version is no longer {expected}, "
            "another migration may have run concurrently.",
            version,
        )


class AuthorizationError(MaillogError):
    """Authorization token missing, invalid or already used."""

    pass
