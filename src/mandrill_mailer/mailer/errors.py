"""Mailer error classes."""


class MailerError(Exception):
    """Base class for mailer errors."""

    pass


class ConfigurationError(MailerError):
    """The mailer is missing or has an invalid configuration."""

    pass


class InitializationError(MailerError):
    """The provider client could not be created."""

    pass


class ViewNotFoundError(MailerError):
    """No local view exists for the requested template."""

    pass


class TemplateRenderError(MailerError):
    """Every renderer failed to produce a body for the template."""

    pass
