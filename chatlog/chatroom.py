"""Group chats and their per-client database row shapes."""

from __future__ import annotations

from dataclasses import dataclass, field

from chatlog.message_v3 import _WIRE_LEN, _proto_fields


@dataclass
class ChatRoomUser:
    """A member of a group chat."""

    user_name: str = ""
    display_name: str = ""


@dataclass
class ChatRoom:
    """A group chat as presented to the rest of the application."""

    name: str = ""
    owner: str = ""
    users: list[ChatRoomUser] = field(default_factory=list)
    remark: str = ""
    nick_name: str = ""
    user2display_name: dict[str, str] = field(default_factory=dict)

    def display_name(self) -> str:
        """Return the remark if set, otherwise the nickname, otherwise ''."""
        return self.remark or self.nick_name or ""


def _parse_room_data(data: bytes) -> list[ChatRoomUser]:
    """Decode the member list of a ``RoomData`` blob; empty if malformed."""
    try:
        users = []
        for number, wire, raw in _proto_fields(data):
            if number != 1 or wire != _WIRE_LEN:
                continue
            user = ChatRoomUser()
            for inner_number, inner_wire, value in _proto_fields(raw):
                if inner_wire != _WIRE_LEN:
                    continue
                if inner_number == 1:
                    user.user_name = value.decode("utf-8")
                elif inner_number == 2:
                    user.display_name = value.decode("utf-8")
            users.append(user)
    except ValueError:
        return []
    return users


def _from_room_data(name: str, owner: str, data: bytes) -> ChatRoom:
    users = _parse_room_data(data) if data else []
    return ChatRoom(
        name=name,
        owner=owner,
        users=users,
        user2display_name={u.user_name: u.display_name for u in users if u.display_name},
    )


@dataclass
class ChatRoomV3:
    """Row of the ``ChatRoom`` table of the v3 Windows client."""

    chat_room_name: str = ""
    reserved2: str = ""  # creator
    room_data: bytes = b""

    def wrap(self) -> ChatRoom:
        return _from_room_data(self.chat_room_name, self.reserved2, self.room_data)


@dataclass
class ChatRoomDarwinV3:
    """Row of the ``GroupContact`` table of the v3 macOS client."""

    m_ns_usr_name: str = ""
    nickname: str = ""
    m_ns_remark: str = ""
    m_ns_chat_room_mem_list: str = ""
    m_ns_chat_room_admin_list: str = ""

    def wrap(self, user2display_name: dict[str, str]) -> ChatRoom:
        """Build the room; display names are taken from ``user2display_name``."""
        members = self.m_ns_chat_room_mem_list.split(";")
        return ChatRoom(
            name=self.m_ns_usr_name,
            owner=self.m_ns_chat_room_admin_list,
            remark=self.m_ns_remark,
            nick_name=self.nickname,
            users=[ChatRoomUser(user_name=m) for m in members],
            user2display_name={
                m: user2display_name[m] for m in members if m in user2display_name
            },
        )


@dataclass
class ChatRoomV4:
    """Row of the ``chat_room`` table of the v4 client."""

    id: int = 0
    user_name: str = ""
    owner: str = ""
    ext_buffer: bytes = b""

    def wrap(self) -> ChatRoom:
        return _from_room_data(self.user_name, self.owner, self.ext_buffer)