"""Chat session records and their per-client database row shapes."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

_ZERO_TIME = datetime(1, 1, 1)


def _format_time(t: datetime) -> str:
    return (
        f"{t.year:04d}-{t.month:02d}-{t.day:02d} "
        f"{t.hour:02d}:{t.minute:02d}:{t.second:02d}"
    )


def _from_unix(seconds: int) -> datetime:
    return datetime.fromtimestamp(seconds)


@dataclass
class Session:
    """A chat session as presented to the rest of the application."""

    user_name: str = ""
    n_order: int = 0
    nick_name: str = ""
    content: str = ""
    n_time: datetime = field(default_factory=lambda: _ZERO_TIME)

    def plain_text(self, limit: int) -> str:
        """Render the session as two lines; content is cut to ``limit`` bytes."""
        parts = [f"{self.nick_name}({self.user_name}) {_format_time(self.n_time)}\n"]
        if limit > 0:
            raw = self.content.encode("utf-8")
            if len(raw) > limit:
                parts.append(raw[:limit].decode("utf-8", errors="ignore"))
                parts.append(" <...>")
            else:
                parts.append(self.content)
        parts.append("\n")
        return "".join(parts)


@dataclass
class SessionV3:
    """Row of the ``Session`` table of the v3 Windows client."""

    str_usr_name: str = ""
    n_order: int = 0
    str_nick_name: str = ""
    str_content: str = ""
    n_time: int = 0

    def wrap(self) -> Session:
        return Session(
            user_name=self.str_usr_name,
            n_order=self.n_order,
            nick_name=self.str_nick_name,
            content=self.str_content,
            n_time=_from_unix(self.n_time),
        )


@dataclass
class SessionDarwinV3:
    """Row of the ``SessionAbstract`` table of the v3 macOS client."""

    m_ns_user_name: str = ""
    m_u_last_time: int = 0

    def wrap(self) -> Session:
        return Session(
            user_name=self.m_ns_user_name,
            n_order=self.m_u_last_time,
            n_time=_from_unix(self.m_u_last_time),
        )


@dataclass
class SessionV4:
    """Row of the ``SessionTable`` table of the v4 client."""

    username: str = ""
    summary: str = ""
    last_timestamp: int = 0
    last_msg_sender: str = ""
    last_sender_display_name: str = ""

    def wrap(self) -> Session:
        return Session(
            user_name=self.username,
            n_order=self.last_timestamp,
            nick_name=self.last_sender_display_name,
            content=self.summary,
            n_time=_from_unix(self.last_timestamp),
        )