class GCLIError(Exception):
    """Base class for all gcli exceptions."""
    pass

class ConfigError(GCLIError):
    """Raised when the configuration file cannot be read or parsed."""
    pass

class AccountNotFoundError(ConfigError):
    """Raised when a named account is not configured."""
    pass

class NoDefaultAccountError(ConfigError):
    """Raised when no account was given and no default account is set."""
    pass

class AccountExistsError(ConfigError):
    """Raised when adding an account whose name is already taken."""
    pass

class InvalidAccountNameError(ConfigError):
    """Raised when an account name contains unsupported characters."""
    pass

class AuthError(GCLIError):
    """Raised when credentials are missing, expired or cannot be refreshed."""
    pass

class ValidationError(GCLIError):
    """Raised when user input (dates, recipients, ...) is malformed."""
    pass

class StoreError(GCLIError):
    """Raised when the scheduled-email file cannot be parsed."""
    pass

class ScheduledEmailNotFoundError(StoreError):
    """Raised when a scheduled email id is not present in the store."""
    pass
