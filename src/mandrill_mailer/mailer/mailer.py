"""Mailer delivering messages through the Mandrill API."""

from enum import Enum
from typing import Any, Callable, Iterable, Optional

from mandrill_mailer.api.client import MandrillClient
from mandrill_mailer.api.errors import ProviderCallError
from mandrill_mailer.config import Settings, get_settings
from mandrill_mailer.email.message import Message
from mandrill_mailer.email.views import RenderedBody, ViewRenderer
from mandrill_mailer.logging import get_logger
from mandrill_mailer.mailer.errors import (
    ConfigurationError,
    InitializationError,
    TemplateRenderError,
    ViewNotFoundError,
)
from mandrill_mailer.mailer.status import interpret_delivery
from mandrill_mailer.metrics import mandrill_messages_total


logger = get_logger()

Renderer = Callable[[str, dict[str, Any]], RenderedBody]

# Failures a renderer may raise that hand over to the next renderer
RECOVERABLE_RENDER_ERRORS = (ProviderCallError, ViewNotFoundError)


class MailerState(str, Enum):
    """Lifecycle of the mailer's provider client."""

    UNINITIALIZED = "uninitialized"
    CREDENTIAL_SET = "credential_set"
    READY = "ready"
    FAILED = "failed"
    CLOSED = "closed"


class Mailer:
    """Send messages through Mandrill.

    The mailer holds the API key and owns one ``MandrillClient``, created on
    ``initialize()`` (explicitly, or on the first send/compose) and reused
    until the mailer is closed. A failed initialisation is terminal: build a
    new mailer.

    Example:
        mailer = Mailer(api_key="...")
        message = mailer.compose("welcome", {"name": "Ada"})
        message.to = ["ada@example.com"]
        message.subject = "Welcome"
        ok = mailer.send(message)
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        settings: Optional[Settings] = None,
        client_factory: Callable[..., MandrillClient] = MandrillClient,
        view_renderer: Optional[ViewRenderer] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.client_factory = client_factory
        self.view_renderer = view_renderer or ViewRenderer(self.settings.views_path)

        self.state = MailerState.UNINITIALIZED
        self._api_key: Optional[str] = None
        self._client: Optional[MandrillClient] = None

        # Ordered fallback list used by compose()
        self.renderers: list[Renderer] = [self._render_remote, self.view_renderer.render]

        if api_key is None:
            api_key = self.settings.mandrill_api_key
        if api_key is not None:
            self.set_credential(api_key)

    @property
    def api_key(self) -> Optional[str]:
        return self._api_key

    @api_key.setter
    def api_key(self, value: str) -> None:
        self.set_credential(value)

    def set_credential(self, value: Any) -> None:
        """Set the Mandrill API key.

        Raises:
            ConfigurationError: If the key is not a string, is blank, or the
                client has already been initialised
        """
        name = f"{type(self).__name__}.api_key"

        if self.state in (MailerState.READY, MailerState.FAILED, MailerState.CLOSED):
            raise ConfigurationError(f'"{name}" cannot be changed after initialization.')
        if not isinstance(value, str):
            raise ConfigurationError(
                f'"{name}" should be a string, "{type(value).__name__}" given.'
            )

        value = value.strip()
        if not value:
            raise ConfigurationError(f'"{name}" length should be greater than 0.')

        self._api_key = value
        self.state = MailerState.CREDENTIAL_SET

    def initialize(self) -> None:
        """Create the provider client.

        Raises:
            ConfigurationError: If no API key has been set
            InitializationError: If the client could not be created, or the
                mailer has been closed
        """
        if self.state is MailerState.READY:
            return
        if self.state is MailerState.FAILED:
            raise InitializationError(
                "The mailer failed to initialize. Please check the application logs."
            )
        if self.state is MailerState.CLOSED:
            raise InitializationError("The mailer has been closed.")
        if self.state is MailerState.UNINITIALIZED:
            raise ConfigurationError(f'"{type(self).__name__}.api_key" cannot be null.')

        try:
            self._client = self.client_factory(
                self._api_key,
                base_url=self.settings.mandrill_api_url,
                timeout=self.settings.api_timeout,
            )
        except Exception as e:
            self.state = MailerState.FAILED
            logger.error(
                "Failed to create Mandrill client",
                error_type=type(e).__name__,
                error=str(e),
            )
            raise InitializationError(
                "An error occurred with your mailer. Please check the application logs."
            ) from None

        self.state = MailerState.READY
        logger.debug("Mandrill client initialized")

    @property
    def client(self) -> MandrillClient:
        """The provider client, initialised on first access."""
        self.initialize()
        return self._client

    def close(self) -> None:
        """Close the provider client's connections.

        A closed mailer cannot be initialised or used again.
        """
        if self._client is not None:
            self._client.close()
            self._client = None
        self.state = MailerState.CLOSED

    def __enter__(self) -> "Mailer":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def send(self, message: Message) -> bool:
        """Send a message.

        Returns:
            True if every recipient was accepted by Mandrill, False if the API
            call failed or any recipient was rejected or invalid
        """
        client = self.client
        message = self._with_defaults(message)

        recipients = message.recipients
        logger.info(
            "Sending email",
            subject=message.subject,
            to=", ".join(recipients),
        )

        if not recipients:
            logger.warning("Email has no recipients", subject=message.subject)
            mandrill_messages_total.labels(result="failed").inc()
            return False

        try:
            response = client.send_message(
                message.to_mandrill(),
                async_=self.settings.mandrill_async,
                ip_pool=self.settings.mandrill_ip_pool,
            )
        except ProviderCallError as e:
            logger.error(
                "A Mandrill error occurred",
                error_type=type(e).__name__,
                error=str(e),
            )
            mandrill_messages_total.labels(result="failed").inc()
            return False

        if not isinstance(response, list):
            logger.error(
                "Unexpected Mandrill response",
                response_type=type(response).__name__,
            )
            mandrill_messages_total.labels(result="failed").inc()
            return False

        verdict = interpret_delivery(response)
        mandrill_messages_total.labels(result="sent" if verdict else "failed").inc()
        return verdict

    def send_multiple(self, messages: Iterable[Message]) -> int:
        """Send messages one by one and return how many succeeded."""
        return sum(1 for message in messages if self.send(message))

    def ping(self) -> bool:
        """Check that Mandrill accepts the API key."""
        try:
            return self.client.ping() == "PONG!"
        except ProviderCallError as e:
            logger.error(
                "A Mandrill error occurred",
                error_type=type(e).__name__,
                error=str(e),
            )
            return False

    def compose(
        self,
        template_name: Optional[str] = None,
        params: Optional[dict[str, Any]] = None,
    ) -> Message:
        """Create a message, rendering its body from a template.

        Renderers in ``self.renderers`` are tried in order: first the Mandrill
        stored template, then the local views.

        Raises:
            TemplateRenderError: If no renderer could produce a body
        """
        message = self._with_defaults(Message())

        if template_name is None:
            return message

        params = params or {}
        last_error: Optional[Exception] = None

        for renderer in self.renderers:
            try:
                body = renderer(template_name, params)
            except RECOVERABLE_RENDER_ERRORS as e:
                logger.error(
                    "Template rendering failed",
                    template=template_name,
                    error_type=type(e).__name__,
                    error=str(e),
                )
                last_error = e
                continue

            message.html = body.html
            message.text = body.text
            return message

        raise TemplateRenderError(f"Unable to render template {template_name!r}") from last_error

    def _render_remote(self, template_name: str, params: dict[str, Any]) -> RenderedBody:
        merge_vars = [{"name": key, "content": value} for key, value in params.items()]
        rendered = self.client.render_template(template_name, [], merge_vars)
        return RenderedBody(html=rendered["html"])

    def _with_defaults(self, message: Message) -> Message:
        """Return a copy of ``message`` with the configured sender filled in."""
        defaults = {}
        if not message.from_email and self.settings.default_from_email:
            defaults["from_email"] = self.settings.default_from_email
        if not message.from_name and self.settings.default_from_name:
            defaults["from_name"] = self.settings.default_from_name
        return message.model_copy(update=defaults, deep=True)
