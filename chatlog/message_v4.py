"""Messages stored by the v4 client."""

from __future__ import annotations

import hashlib
import os
from dataclasses import dataclass
from datetime import datetime
from typing import NamedTuple, Optional

import zstandard

from chatlog.message import WECHAT_V4, Message
from chatlog.message_v3 import _WIRE_LEN, _proto_fields

_ZSTD_MAGIC = b"\x28\xb5\x2f\xfd"


@dataclass
class PackedMedia:
    """Hash of an image or video referenced by a v4 message."""

    md5: str = ""


class _PackedInfo(NamedTuple):
    image: Optional[PackedMedia]
    video: Optional[PackedMedia]


def _parse_media(raw: bytes, md5_field: int) -> PackedMedia:
    md5 = ""
    for number, wire, value in _proto_fields(raw):
        if number == md5_field and wire == _WIRE_LEN:
            md5 = value.decode("utf-8")
    return PackedMedia(md5=md5)


def _parse_packed_info(data: bytes) -> Optional[_PackedInfo]:
    """Decode a ``packed_info_data`` blob; None if it is malformed."""
    image_parts: list[bytes] = []
    video_parts: list[bytes] = []
    try:
        for number, wire, value in _proto_fields(data):
            if number == 3 and wire == _WIRE_LEN:
                image_parts.append(value)
            elif number == 4 and wire == _WIRE_LEN:
                video_parts.append(value)
        image = _parse_media(b"".join(image_parts), 4) if image_parts else None
        video = _parse_media(b"".join(video_parts), 8) if video_parts else None
    except ValueError:
        return None
    return _PackedInfo(image=image, video=video)


def _zstd_decompress(data: bytes) -> bytes:
    try:
        return zstandard.ZstdDecompressor().decompressobj().decompress(data)
    except zstandard.ZstdError as exc:
        raise ValueError(f"invalid zstd data: {exc}") from exc


def _path(*parts: str) -> str:
    return os.path.normpath(os.path.join(*parts))


@dataclass
class MessageV4:
    """Row of a ``Msg_<md5>`` table of the v4 client."""

    sort_seq: int = 0
    server_id: int = 0
    local_type: int = 0
    user_name: str = ""
    create_time: int = 0
    message_content: bytes = b""
    packed_info_data: bytes = b""
    status: int = 0  # 2: sent, 4: received

    def wrap(self, talker: str) -> Message:
        message = Message(
            seq=self.sort_seq,
            time=datetime.fromtimestamp(self.create_time),
            talker=talker,
            is_chat_room=talker.endswith("@chatroom"),
            sender=self.user_name,
            type=self.local_type,
            version=WECHAT_V4,
        )
        # The status is not always reliable; the user name refines it.
        message.is_self = self.status == 2 or (
            not message.is_chat_room and talker != self.user_name
        )

        raw = bytes(self.message_content)
        if raw.startswith(_ZSTD_MAGIC):
            try:
                content = _zstd_decompress(raw).decode("utf-8", errors="replace")
            except ValueError:
                content = ""
        else:
            content = raw.decode("utf-8", errors="replace")

        if message.is_chat_room:
            sender, sep, rest = content.partition(":\n")
            if sep:
                message.sender = sender
                content = rest

        try:
            message.parse_media_info(content)
        except ValueError:
            pass

        if message.type == 34:
            message.contents["voice"] = str(self.server_id)

        if self.packed_info_data:
            packed = _parse_packed_info(self.packed_info_data)
            if packed is not None:
                month = message.time.strftime("%Y-%m")
                if message.type == 3 and packed.image is not None:
                    talker_md5 = hashlib.md5(talker.encode("utf-8")).hexdigest()
                    md5 = packed.image.md5
                    message.contents["imgfile"] = _path(
                        "msg", "attach", talker_md5, month, "Img", f"{md5}.dat"
                    )
                    message.contents["thumb"] = _path(
                        "msg", "attach", talker_md5, month, "Img", f"{md5}_t.dat"
                    )
                if message.type == 43 and packed.video is not None:
                    md5 = packed.video.md5
                    message.contents["videofile"] = _path("msg", "video", month, f"{md5}.mp4")
                    message.contents["thumb"] = _path(
                        "msg", "video", month, f"{md5}_thumb.jpg"
                    )

        return message