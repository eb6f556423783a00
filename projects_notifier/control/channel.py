"""Inbound command channel.

An operator pauses or resumes collection by mailing the notifier's
own mailbox a message whose subject is exactly the stop or start token.
The core only depends on ControlChannel.poll_new_commands(); IMAP is
one transport for it.
"""

import asyncio
import imaplib
import logging
import re
import ssl
from abc import ABC, abstractmethod
from email import message_from_bytes
from email.header import decode_header, make_header
from enum import Enum

from projects_notifier.errors import ControlChannelError

logger = logging.getLogger(__name__)


class Command(str, Enum):
    """Recognized operator commands."""

    STOP = "stop"
    START = "start"
    UNKNOWN = "unknown"


def parse_command(subject: str, stop_token: str = "stop", start_token: str = "start") -> Command:
    """Map a message subject to a Command; anything else is UNKNOWN."""
    subject = subject.strip()
    if subject == stop_token:
        return Command.STOP
    if subject == start_token:
        return Command.START
    return Command.UNKNOWN


class ControlChannel(ABC):
    """Source of operator commands."""

    @abstractmethod
    async def poll_new_commands(self) -> list[Command]:
        """Return commands received since the previous poll, oldest first.

        Raises:
            ControlChannelError: If the transport is unreachable.
        """


class ImapControlChannel(ControlChannel):
    """Reads command subjects from unseen messages in an IMAP inbox.

    The inbox is opened read-only and headers are fetched with
    BODY.PEEK, so messages keep their unseen state for the operator.
    UIDs already handled by this process are skipped.
    """

    def __init__(
        self,
        host: str,
        port: int,
        login: str,
        password: str,
        stop_token: str = "stop",
        start_token: str = "start",
        mailbox: str = "INBOX",
        timeout: float = 30.0,
    ) -> None:
        self._host = host
        self._port = port
        self._login = login
        self._password = password
        self._stop_token = stop_token
        self._start_token = start_token
        self._mailbox = mailbox
        self._timeout = timeout
        self._last_uid = 0

    async def poll_new_commands(self) -> list[Command]:
        try:
            subjects = await asyncio.to_thread(self._fetch_unseen_subjects)
        except (imaplib.IMAP4.error, OSError) as e:
            raise ControlChannelError(f"IMAP poll of {self._host} failed: {e}") from e

        return [
            parse_command(subject, self._stop_token, self._start_token)
            for subject in subjects
        ]

    def _fetch_unseen_subjects(self) -> list[str]:
        subjects: list[str] = []
        imap = imaplib.IMAP4(self._host, self._port, timeout=self._timeout)
        try:
            imap.starttls(ssl_context=ssl.create_default_context())
            imap.login(self._login, self._password)
            imap.select(self._mailbox, readonly=True)

            _, data = imap.uid("SEARCH", None, "UNSEEN")
            uids = sorted(int(uid) for uid in (data[0] or b"").split())

            new_uids = [uid for uid in uids if uid > self._last_uid]
            for uid in new_uids:
                _, fetched = imap.uid("FETCH", str(uid), "(BODY.PEEK[HEADER.FIELDS (SUBJECT)])")
                subjects.append(_subject_from_fetch(fetched))

            # Only a complete poll marks its messages as handled
            if new_uids:
                self._last_uid = new_uids[-1]
        finally:
            try:
                imap.logout()
            except (imaplib.IMAP4.error, OSError):
                logger.debug("IMAP logout failed", exc_info=True)

        return subjects


def _subject_from_fetch(fetched: list) -> str:
    """Decode the Subject header from a UID FETCH response."""
    for part in fetched:
        if isinstance(part, tuple) and len(part) > 1:
            message = message_from_bytes(part[1])
            raw = message.get("Subject", "")
            subject = str(make_header(decode_header(raw)))
            return re.sub(r"\s+", " ", subject).strip()
    return ""
