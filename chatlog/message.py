"""Chat messages: decoding of message payloads and plain-text rendering."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from chatlog.mediamessage import (
    MediaMsg,
    RecordInfo,
    SysMsg,
    parse_media_msg,
    parse_record_info,
    parse_sys_msg,
)

DEBUG = False

WECHAT_V3 = "wechatv3"
WECHAT_V4 = "wechatv4"
WECHAT_DARWIN_V3 = "wechatdarwinv3"

DEFAULT_TIME_FORMAT = "%m-%d %H:%M:%S"
SYSTEM_SENDER = "系统消息"

_ZERO_TIME = datetime(1, 1, 1)
_LOW_32 = 0xFFFFFFFF

_PAY_DIRECTIONS = {
    1: "发送 ",  # instant transfer
    7: "发送 ",  # delayed transfer
    3: "接收 ",  # instant transfer received
    5: "接收 ",  # delayed transfer received
    4: "退还 ",  # transfer refunded
}

_APP_PLACEHOLDERS = {
    8: "[GIF表情]",
    63: "[视频号]",
    87: "[群公告]",
    2001: "[红包]",
    2003: "[红包封面]",
}

_TYPE_PLACEHOLDERS = {
    42: "[名片]",
    47: "[动画表情]",
    50: "[语音通话]",
}


def split_type(value: int) -> tuple[int, int]:
    """Split a packed message type into ``(type, sub_type)``.

    The low 32 bits carry the type and the high bits the sub type.
    """
    return value & _LOW_32, value >> 32


def _from_unix(seconds: int) -> datetime:
    return datetime.fromtimestamp(seconds)


def _truncate_bytes(text: str, limit: int) -> Optional[str]:
    """Return ``text`` cut to ``limit`` UTF-8 bytes, or None if it already fits."""
    raw = text.encode("utf-8")
    if len(raw) <= limit:
        return None
    return raw[:limit].decode("utf-8", errors="ignore")


@dataclass
class Message:
    """A chat message as presented to the rest of the application."""

    version: str = ""
    seq: int = 0
    time: datetime = field(default_factory=lambda: _ZERO_TIME)
    talker: str = ""
    talker_name: str = ""
    is_chat_room: bool = False
    sender: str = ""
    sender_name: str = ""
    is_self: bool = False
    type: int = 0
    sub_type: int = 0
    content: str = ""
    contents: dict[str, Any] = field(default_factory=dict)

    media_msg: Optional[MediaMsg] = None
    sys_msg: Optional[SysMsg] = None

    # ------------------------------------------------------------------
    # Decoding
    # ------------------------------------------------------------------

    def parse_media_info(self, data: str) -> None:
        """Decode the raw payload ``data`` according to the message type.

        Raises ValueError when a media payload is not valid XML.
        """
        self.type, self.sub_type = split_type(self.type)

        if self.type == 1:
            self.content = data
            return

        if self.type == 10000:
            try:
                sys_msg = parse_sys_msg(data)
            except ValueError:
                self.content = data
                return
            if DEBUG:
                self.sys_msg = sys_msg
            self.sender = SYSTEM_SENDER
            self.sender_name = ""
            self.content = sys_msg.to_text()
            return

        msg = parse_media_msg(data)
        if DEBUG:
            self.media_msg = msg

        if self.type == 3:
            self.contents["md5"] = msg.image.md5
        elif self.type == 43:
            if msg.video.md5:
                self.contents["md5"] = msg.video.md5
            if msg.video.raw_md5:
                self.contents["rawmd5"] = msg.video.raw_md5
        elif self.type == 49:
            self._parse_app(msg)

    def _parse_app(self, msg: MediaMsg) -> None:
        app = msg.app
        self.sub_type = app.type
        sub = self.sub_type

        if sub == 5:
            self.contents["title"] = app.title
            self.contents["url"] = app.url
        elif sub == 6:
            self.contents["title"] = app.title
            self.contents["md5"] = app.md5
        elif sub == 19:
            self.contents["title"] = app.title
            self.contents["desc"] = app.des
            if app.record_item is not None:
                self.contents["recordInfo"] = parse_record_info(app.record_item.cdata)
        elif sub in (33, 36):
            self.contents["title"] = app.source_display_name
            self.contents["url"] = app.url
        elif sub == 51:
            feed = app.finder_feed
            if feed is not None:
                self.contents["title"] = feed.desc
                if feed.media_list:
                    self.contents["url"] = feed.media_list[0].url
        elif sub == 57:
            self.content = app.title
            refer = app.refer_msg
            if refer is None:
                return
            quoted = Message(
                type=refer.type,
                time=_from_unix(refer.create_time),
                sender=refer.chat_usr or refer.from_usr,
                sender_name=refer.display_name,
            )
            try:
                quoted.parse_media_info(refer.content)
            except ValueError:
                return
            self.contents["refer"] = quoted
        elif sub == 62:
            pat = app.pat_msg
            if pat is not None and pat.records:
                first = pat.records[0]
                self.sender = first.from_user
                self.content = first.templete
        elif sub == 2000:
            pay = app.wc_pay_info
            if pay is None:
                return
            direction = _PAY_DIRECTIONS.get(pay.pay_sub_type, "")
            memo = f"({pay.pay_memo})" if pay.pay_memo else ""
            self.content = f"[转账|{direction}{pay.fee_desc}]{memo}"

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def set_content(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key`` in the structured contents."""
        self.contents[key] = value

    def plain_text(self, show_chat_room: bool, time_format: str, host: str) -> str:
        """Render a header line and the message body, links pointing at ``host``.

        ``time_format`` is a strftime format; empty means month-day and time.
        """
        time_format = time_format or DEFAULT_TIME_FORMAT
        self.set_content("host", host)

        sender = "我" if self.is_self else self.sender
        parts = [f"{self.sender_name}({sender})" if self.sender_name else sender, " "]

        if self.is_chat_room and show_chat_room:
            talker = f"{self.talker_name}({self.talker})" if self.talker_name else self.talker
            parts.append(f"[{talker}] ")

        parts.append(self.time.strftime(time_format))
        parts.append("\n")
        parts.append(self.plain_text_content())
        parts.append("\n")
        return "".join(parts)

    def _str_content(self, key: str) -> str:
        value = self.contents.get(key)
        return value if isinstance(value, str) else ""

    def _keys(self, *names: str) -> str:
        return ",".join(
            value for value in (self.contents.get(n) for n in names) if isinstance(value, str)
        )

    def plain_text_content(self) -> str:
        """Render only the message body."""
        host = self._str_content("host")

        if self.type in (1, 10000):
            return self.content
        if self.type == 3:
            return f"![图片](http://{host}/image/{self._keys('md5', 'imgfile', 'thumb')})"
        if self.type == 34:
            if "voice" in self.contents:
                return f"[语音](http://{host}/voice/{self.contents['voice']})"
            return "[语音]"
        if self.type == 43:
            keys = self._keys("md5", "rawmd5", "videofile", "thumb")
            return f"![视频](http://{host}/video/{keys})"
        if self.type in _TYPE_PLACEHOLDERS:
            return _TYPE_PLACEHOLDERS[self.type]
        if self.type == 49:
            return self._app_text(host)

        content = self.content
        cut = _truncate_bytes(content, 120)
        if cut is not None:
            content = cut + "<...>"
        return f"Type: {self.type} Content: {content}"

    def _app_text(self, host: str) -> str:
        sub = self.sub_type
        title = self._str_content("title")
        url = self._str_content("url")

        if sub == 5:
            return f"[链接|{title}]({url})"
        if sub == 6:
            return f"[文件|{title}](http://{host}/file/{self._str_content('md5')})"
        if sub == 19:
            record = self.contents.get("recordInfo")
            if not isinstance(record, RecordInfo):
                return "[合并转发]"
            return record.to_text("", host)
        if sub in (33, 36):
            return f"[小程序|{title}]({url})" if title else "[小程序]"
        if sub == 51:
            return f"[视频号|{title}]({url})" if title else "[视频号]"
        if sub == 57:
            refer = self.contents.get("refer")
            if not isinstance(refer, Message):
                return "> [引用]\n" + self.content if self.content else "[引用]"
            quoted = refer.plain_text(False, "", host)
            lines = [f"> {line}\n" for line in quoted.split("\n") if line]
            return "".join(lines) + self.content
        if sub in (62, 2000):
            return self.content
        return _APP_PLACEHOLDERS.get(sub, "[分享]")


@dataclass
class MessageDarwinV3:
    """Row of a ``Chat_<md5>`` table of the v3 macOS client."""

    msg_create_time: int = 0
    msg_content: str = ""
    message_type: int = 0
    mes_des: int = 0  # 0: sent, 1: received

    def wrap(self, talker: str) -> Message:
        message = Message(
            time=_from_unix(self.msg_create_time),
            type=self.message_type,
            talker=talker,
            is_chat_room=talker.endswith("@chatroom"),
            is_self=self.mes_des == 0,
            version=WECHAT_DARWIN_V3,
        )

        content = self.msg_content
        if message.is_chat_room:
            sender, sep, rest = content.partition(":\n")
            if sep:
                message.sender = sender
                content = rest
        elif not message.is_self:
            message.sender = talker

        try:
            message.parse_media_info(content)
        except ValueError:
            pass
        return message