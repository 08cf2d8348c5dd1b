"""Messages stored by the v3 Windows client."""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union

import lz4.block

from chatlog.message import WECHAT_V3, Message

_WIRE_VARINT = 0
_WIRE_I64 = 1
_WIRE_LEN = 2
_WIRE_I32 = 5

_MAX_FIELD_NUMBER = (1 << 29) - 1
_MASK_64 = (1 << 64) - 1

ProtoValue = Union[int, bytes]


def _read_varint(buf: bytes, pos: int) -> tuple[int, int]:
    result = 0
    shift = 0
    while True:
        if pos >= len(buf):
            raise ValueError("truncated varint")
        byte = buf[pos]
        pos += 1
        result |= (byte & 0x7F) << shift
        if byte < 0x80:
            return result & _MASK_64, pos
        shift += 7
        if shift >= 70:
            raise ValueError("varint too long")


def _proto_fields(buf: bytes) -> list[tuple[int, int, ProtoValue]]:
    """Split a protobuf message into ``(number, wire_type, value)`` triples.

    Raises ValueError on malformed input.
    """
    fields: list[tuple[int, int, ProtoValue]] = []
    pos = 0
    end = len(buf)
    while pos < end:
        key, pos = _read_varint(buf, pos)
        number, wire = key >> 3, key & 7
        if number == 0 or number > _MAX_FIELD_NUMBER:
            raise ValueError(f"invalid field number {number}")
        value: ProtoValue
        if wire == _WIRE_VARINT:
            value, pos = _read_varint(buf, pos)
        elif wire in (_WIRE_I64, _WIRE_I32):
            width = 8 if wire == _WIRE_I64 else 4
            if pos + width > end:
                raise ValueError("truncated fixed-width field")
            value = int.from_bytes(buf[pos:pos + width], "little")
            pos += width
        elif wire == _WIRE_LEN:
            length, pos = _read_varint(buf, pos)
            if pos + length > end:
                raise ValueError("truncated length-delimited field")
            value = bytes(buf[pos:pos + length])
            pos += length
        else:
            raise ValueError(f"unsupported wire type {wire}")
        fields.append((number, wire, value))
    return fields


def _int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - (1 << 32) if value >= 1 << 31 else value


def _parse_bytes_extra(data: bytes) -> Optional[dict[int, str]]:
    """Map item type to value from a ``BytesExtra`` blob; None if unusable."""
    try:
        result: dict[int, str] = {}
        for number, wire, raw in _proto_fields(data):
            if number != 3 or wire != _WIRE_LEN:
                continue
            item_type, value = 0, ""
            for inner_number, inner_wire, inner in _proto_fields(raw):
                if inner_number == 1 and inner_wire == _WIRE_VARINT:
                    item_type = _int32(inner)
                elif inner_number == 2 and inner_wire == _WIRE_LEN:
                    value = inner.decode("utf-8")
            result[item_type] = value
    except ValueError:
        return None
    return result or None


def _lz4_decompress(data: bytes) -> bytes:
    """Decompress a raw LZ4 block; raises ValueError if it cannot be decoded."""
    if not data:
        raise ValueError("empty lz4 block")
    size = max(len(data) * 4, 64)
    limit = len(data) * 255 + 64
    while True:
        try:
            return lz4.block.decompress(data, uncompressed_size=size)
        except lz4.block.LZ4BlockError as exc:
            if size >= limit:
                raise ValueError("invalid lz4 block") from exc
            size = min(size * 4, limit)


@dataclass
class MessageV3:
    """Row of the ``MSG`` table of the v3 Windows client."""

    msg_svr_id: int = 0
    sequence: int = 0
    create_time: int = 0
    str_talker: str = ""
    is_sender: int = 0  # 0: received, 1: sent
    type: int = 0
    sub_type: int = 0
    str_content: str = ""
    compress_content: bytes = b""
    bytes_extra: bytes = b""

    def wrap(self) -> Message:
        message = Message(
            seq=self.sequence,
            time=datetime.fromtimestamp(self.create_time),
            talker=self.str_talker,
            is_chat_room=self.str_talker.endswith("@chatroom"),
            is_self=self.is_sender == 1,
            type=self.type,
            sub_type=self.sub_type,
            content=self.str_content,
            version=WECHAT_V3,
        )

        if not message.is_chat_room and not message.is_self:
            message.sender = self.str_talker

        if message.type == 49:
            try:
                message.content = _lz4_decompress(self.compress_content).decode(
                    "utf-8", errors="replace"
                )
            except ValueError:
                pass

        try:
            message.parse_media_info(message.content)
        except ValueError:
            pass

        if message.type == 34:
            message.contents["voice"] = str(self.msg_svr_id)

        if self.bytes_extra:
            extra = _parse_bytes_extra(self.bytes_extra)
            if extra is not None:
                if message.is_chat_room:
                    message.sender = extra.get(1, "")
                # The md5 in the XML does not match the hard-link records,
                # so the stored path is used instead.
                if message.type == 43:
                    path = extra.get(4, "")
                    parts = path.replace(os.sep, "/").split("/")
                    if len(parts) > 1:
                        path = "/".join(parts[1:])
                    message.contents["videofile"] = path

        return message