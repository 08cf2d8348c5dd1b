"""Contact records and their per-client database row shapes."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Contact:
    """A contact as presented to the rest of the application."""

    user_name: str = ""
    alias: str = ""
    remark: str = ""
    nick_name: str = ""
    is_friend: bool = False

    def display_name(self) -> str:
        """Return the remark if set, otherwise the nickname, otherwise ''."""
        return self.remark or self.nick_name or ""


@dataclass
class ContactV3:
    """Row of the ``Contact`` table of the v3 Windows client."""

    user_name: str = ""
    alias: str = ""
    remark: str = ""
    nick_name: str = ""
    # 1: own friend or joined group chat; 0: group member who is not a friend
    reserved1: int = 0

    def wrap(self) -> Contact:
        return Contact(
            user_name=self.user_name,
            alias=self.alias,
            remark=self.remark,
            nick_name=self.nick_name,
            is_friend=self.reserved1 == 1,
        )


@dataclass
class ContactDarwinV3:
    """Row of the ``WCContact`` table of the v3 macOS client."""

    m_ns_usr_name: str = ""
    nickname: str = ""
    m_ns_remark: str = ""
    m_ui_sex: int = 0
    m_ns_alias_name: str = ""

    def wrap(self) -> Contact:
        return Contact(
            user_name=self.m_ns_usr_name,
            alias=self.m_ns_alias_name,
            remark=self.m_ns_remark,
            nick_name=self.nickname,
            is_friend=True,
        )


@dataclass
class ContactV4:
    """Row of the ``contact`` table of the v4 client."""

    user_name: str = ""
    alias: str = ""
    remark: str = ""
    nick_name: str = ""
    # 2: group chat; 3: group member who is not a friend; 5, 6: enterprise
    local_type: int = 0

    def wrap(self) -> Contact:
        return Contact(
            user_name=self.user_name,
            alias=self.alias,
            remark=self.remark,
            nick_name=self.nick_name,
            is_friend=self.local_type != 3,
        )