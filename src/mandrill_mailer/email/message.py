"""Email message model and conversion to the Mandrill payload."""

from typing import Any, Optional

from pydantic import BaseModel, Field


class Message(BaseModel):
    """An outgoing email.

    Built by the caller and only read by the mailer; the default sender is
    applied to a copy at send time.
    """

    to: list[str] = Field(default_factory=list)
    cc: list[str] = Field(default_factory=list)
    bcc: list[str] = Field(default_factory=list)
    subject: str = ""
    text: Optional[str] = None
    html: Optional[str] = None
    from_email: Optional[str] = None
    from_name: Optional[str] = None
    reply_to: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    headers: dict[str, str] = Field(default_factory=dict)

    @property
    def recipients(self) -> list[str]:
        """All recipient addresses, in to/cc/bcc order."""
        return [*self.to, *self.cc, *self.bcc]

    def to_mandrill(self) -> dict[str, Any]:
        """Build the ``message`` struct accepted by ``messages/send``."""
        payload: dict[str, Any] = {
            "subject": self.subject,
            "to": [
                {"email": address, "type": kind}
                for kind, addresses in (("to", self.to), ("cc", self.cc), ("bcc", self.bcc))
                for address in addresses
            ],
        }

        if self.html is not None:
            payload["html"] = self.html
        if self.text is not None:
            payload["text"] = self.text
        if self.from_email:
            payload["from_email"] = self.from_email
        if self.from_name:
            payload["from_name"] = self.from_name
        if self.tags:
            payload["tags"] = list(self.tags)

        headers = dict(self.headers)
        if self.reply_to:
            headers["Reply-To"] = self.reply_to
        if headers:
            payload["headers"] = headers

        # Keep cc/bcc addresses out of the visible To header
        payload["preserve_recipients"] = False

        return payload
