"""Command line entry point for Mandrill Mailer."""

import argparse
import sys
from typing import Optional, Sequence

from mandrill_mailer import __version__
from mandrill_mailer.config import get_settings
from mandrill_mailer.logging import get_logger, setup_logging
from mandrill_mailer.mailer.errors import MailerError
from mandrill_mailer.mailer.mailer import Mailer


logger = get_logger()


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(
        prog="mandrill-mailer",
        description="Send email through the Mandrill API.",
    )
    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument("--api-key", help="Mandrill API key (defaults to MANDRILL_API_KEY)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    send = subparsers.add_parser("send", help="Send a single message")
    send.add_argument("--to", action="append", required=True, help="Recipient address")
    send.add_argument("--cc", action="append", default=[], help="Cc address")
    send.add_argument("--bcc", action="append", default=[], help="Bcc address")
    send.add_argument("--subject", default="", help="Subject line")
    send.add_argument("--text", help="Plain text body")
    send.add_argument("--html", help="HTML body")
    send.add_argument("--from-email", help="Sender address")
    send.add_argument("--template", help="Template or view name used for the body")
    send.add_argument(
        "--param",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Template merge parameter",
    )

    subparsers.add_parser("ping", help="Check the API key against Mandrill")

    return parser


def parse_params(pairs: Sequence[str]) -> dict[str, str]:
    """Parse ``KEY=VALUE`` pairs."""
    params = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ValueError(f"Invalid parameter {pair!r}, expected KEY=VALUE")
        params[key] = value
    return params


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the command line interface and return the exit code."""
    args = build_parser().parse_args(argv)

    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)

    try:
        with Mailer(api_key=args.api_key, settings=settings) as mailer:
            if args.command == "ping":
                ok = mailer.ping()
                logger.info("Ping finished", ok=ok)
                return 0 if ok else 1

            message = mailer.compose(args.template, parse_params(args.param))
            message.to = args.to
            message.cc = args.cc
            message.bcc = args.bcc
            message.subject = args.subject
            if args.text is not None:
                message.text = args.text
            if args.html is not None:
                message.html = args.html
            if args.from_email:
                message.from_email = args.from_email

            return 0 if mailer.send(message) else 1
    except (MailerError, ValueError) as e:
        logger.error("Mailer error", error_type=type(e).__name__, error=str(e))
        return 1


def run() -> None:
    """Run the application and exit with its status."""
    sys.exit(main())


if __name__ == "__main__":
    run()
