"""Interpretation of Mandrill per-recipient delivery records."""

from enum import Enum
from typing import Any, Iterable, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from mandrill_mailer.logging import get_logger
from mandrill_mailer.metrics import mandrill_recipients_total


logger = get_logger()


class DeliveryStatus(str, Enum):
    """Delivery status tags returned by ``messages/send``."""

    SENT = "sent"
    QUEUED = "queued"
    SCHEDULED = "scheduled"
    REJECTED = "rejected"
    INVALID = "invalid"


class DeliveryRecord(BaseModel):
    """One recipient entry of a ``messages/send`` response."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    email: str
    status: str
    reject_reason: Optional[str] = None
    id: Optional[str] = Field(default=None, alias="_id")

    @property
    def delivery_status(self) -> Optional[DeliveryStatus]:
        """The known status, or None for tags this mailer does not recognise."""
        try:
            return DeliveryStatus(self.status)
        except ValueError:
            return None


def interpret_delivery(
    records: Iterable[Union[DeliveryRecord, Mapping[str, Any]]],
    log: Any = None,
) -> bool:
    """Fold delivery records into a verdict, logging one event per recipient.

    Every record is visited so that all rejections are reported. The verdict
    is False when any recipient was rejected, invalid, carries an
    unrecognised status, or its record cannot be parsed.

    Args:
        records: Raw response entries or parsed records
        log: Logger to emit events on (defaults to the module logger)

    Returns:
        True if every recipient was sent, queued or scheduled
    """
    log = log or logger
    verdict = True

    for raw in records:
        try:
            record = raw if isinstance(raw, DeliveryRecord) else DeliveryRecord.model_validate(raw)
        except ValidationError as e:
            verdict = False
            mandrill_recipients_total.labels(status="malformed").inc()
            log.warning(
                "Malformed delivery record",
                recipient=raw.get("email") if isinstance(raw, Mapping) else None,
                error=str(e),
            )
            continue

        status = record.delivery_status
        mandrill_recipients_total.labels(status=status.value if status else "unknown").inc()

        if status is DeliveryStatus.SENT:
            log.info("Email sent", recipient=record.email, status=record.status)
        elif status is DeliveryStatus.QUEUED:
            log.info("Email queued for sending", recipient=record.email, status=record.status)
        elif status is DeliveryStatus.SCHEDULED:
            log.info("Email submission scheduled", recipient=record.email, status=record.status)
        elif status is DeliveryStatus.REJECTED:
            verdict = False
            log.warning(
                "Email rejected",
                recipient=record.email,
                status=record.status,
                reject_reason=record.reject_reason,
            )
        elif status is DeliveryStatus.INVALID:
            verdict = False
            log.warning("Email not sent", recipient=record.email, status=record.status)
        else:
            verdict = False
            log.warning(
                "Unrecognised delivery status",
                recipient=record.email,
                status=record.status,
            )

    return verdict
