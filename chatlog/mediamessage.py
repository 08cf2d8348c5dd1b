"""XML payloads carried by media, app and system messages."""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field, fields
from typing import Any, Callable, Optional, Union

_INT_RE = re.compile(r"[+-]?[0-9]+")
_PLACEHOLDER_RE = re.compile(r"\$([^$]+)\$")


# ---------------------------------------------------------------------------
# Declarative field specs and a small decoder driven by them
# ---------------------------------------------------------------------------

def _attr(path: str) -> Any:
    """Attribute; ``path`` is ``name`` or ``child/.../name``."""
    return field(default="", metadata={"xml": ("attr", path, None)})


def _text(path: str) -> Any:
    return field(default="", metadata={"xml": ("text", path, None)})


def _int(path: str) -> Any:
    return field(default=0, metadata={"xml": ("int", path, None)})


def _child(path: str, target: Callable[[], type]) -> Any:
    return field(default=None, metadata={"xml": ("child", path, target)})


def _struct(path: str, target: type) -> Any:
    return field(default_factory=target, metadata={"xml": ("struct", path, target)})


def _list(path: str, target: Callable[[], type]) -> Any:
    return field(default_factory=list, metadata={"xml": ("list", path, target)})


def _chardata() -> Any:
    return field(default="", metadata={"xml": ("chardata", "", None)})


def _local(tag: Any) -> str:
    return tag.rsplit("}", 1)[-1] if isinstance(tag, str) else ""


def _own_text(el: ET.Element) -> str:
    """Character data directly inside ``el``; nested elements are skipped."""
    return "".join([el.text or ""] + [child.tail or "" for child in el])


def _last_child(el: ET.Element, name: str) -> Optional[ET.Element]:
    found = None
    for child in el:
        if _local(child.tag) == name:
            found = child
    return found


def _find(el: Optional[ET.Element], path: str) -> Optional[ET.Element]:
    node = el
    for name in path.split("/"):
        if node is None:
            return None
        node = _last_child(node, name)
    return node


def _find_all(el: ET.Element, path: str) -> list[ET.Element]:
    *head, last = path.split("/")
    parent = _find(el, "/".join(head)) if head else el
    if parent is None:
        return []
    return [child for child in parent if _local(child.tag) == last]


def _parse_int(text: str) -> int:
    text = text.strip()
    if not text:
        return 0
    if not _INT_RE.fullmatch(text):
        raise ValueError(f"invalid integer value {text!r}")
    return int(text)


def _decode(cls: type, el: ET.Element) -> Any:
    values: dict[str, Any] = {}
    for f in fields(cls):
        spec = f.metadata.get("xml")
        if spec is None:
            continue
        kind, path, target = spec
        if kind == "attr":
            *head, name = path.split("/")
            node = _find(el, "/".join(head)) if head else el
            values[f.name] = "" if node is None else node.attrib.get(name, "")
        elif kind == "text":
            node = _find(el, path)
            values[f.name] = "" if node is None else _own_text(node)
        elif kind == "int":
            node = _find(el, path)
            values[f.name] = 0 if node is None else _parse_int(_own_text(node))
        elif kind == "child":
            node = _find(el, path)
            values[f.name] = None if node is None else _decode(target(), node)
        elif kind == "struct":
            node = _find(el, path)
            values[f.name] = target() if node is None else _decode(target, node)
        elif kind == "list":
            item_type = target()
            values[f.name] = [
                _own_text(node) if item_type is str else _decode(item_type, node)
                for node in _find_all(el, path)
            ]
        elif kind == "chardata":
            values[f.name] = _own_text(el)
    return cls(**values)


def _root(data: Union[str, bytes], name: Optional[str] = None) -> ET.Element:
    text = data.lstrip()
    try:
        root = ET.fromstring(text)
    except ET.ParseError as exc:
        raise ValueError(f"invalid XML: {exc}") from exc
    if name is not None and _local(root.tag) != name:
        raise ValueError(f"expected element <{name}> but have <{_local(root.tag)}>")
    return root


# ---------------------------------------------------------------------------
# Media message (<msg>)
# ---------------------------------------------------------------------------

@dataclass
class Image:
    md5: str = _attr("md5")


@dataclass
class Video:
    md5: str = _attr("md5")
    raw_md5: str = _attr("rawmd5")


@dataclass
class ReferMsg:
    """A quoted message."""

    type: int = _int("type")
    svr_id: str = _text("svrid")
    from_usr: str = _text("fromusr")
    chat_usr: str = _text("chatusr")
    display_name: str = _text("displayname")
    msg_source: str = _text("msgsource")
    content: str = _text("content")
    str_id: str = _text("strid")
    create_time: int = _int("createtime")


@dataclass
class AppAttach:
    total_len: str = _text("totallen")
    attach_id: str = _text("attachid")
    cdn_attach_url: str = _text("cdnattachurl")
    emoticon_md5: str = _text("emoticonmd5")
    aes_key: str = _text("aeskey")
    file_ext: str = _text("fileext")
    is_large_file_msg: str = _text("islargefilemsg")


@dataclass
class DataItem:
    """One entry of a forwarded chat record."""

    data_type: str = _attr("datatype")
    data_id: str = _attr("dataid")
    html_id: str = _attr("htmlid")
    data_fmt: str = _text("datafmt")
    source_name: str = _text("sourcename")
    source_time: str = _text("sourcetime")
    source_head_url: str = _text("sourceheadurl")
    data_desc: str = _text("datadesc")

    thumb_source_path: str = _text("thumbsourcepath")
    thumb_size: str = _text("thumbsize")
    cdn_data_url: str = _text("cdndataurl")
    cdn_data_key: str = _text("cdndatakey")
    cdn_thumb_url: str = _text("cdnthumburl")
    cdn_thumb_key: str = _text("cdnthumbkey")
    data_source_path: str = _text("datasourcepath")
    full_md5: str = _text("fullmd5")
    thumb_full_md5: str = _text("thumbfullmd5")
    thumb_head256_md5: str = _text("thumbhead256md5")
    data_size: str = _text("datasize")
    cdn_encry_ver: str = _text("cdnencryver")
    src_chatname: str = _text("srcChatname")
    src_msg_local_id: str = _text("srcMsgLocalid")
    src_msg_create_time: str = _text("srcMsgCreateTime")
    message_uuid: str = _text("messageuuid")
    from_new_msg_id: str = _text("fromnewmsgid")

    # nested forwarded record
    data_title: str = _text("datatitle")
    record_xml: Optional[RecordInfo] = _child("recordxml/recordinfo", lambda: RecordInfo)


@dataclass
class RecordInfo:
    """A forwarded bundle of chat messages."""

    from_scene: str = _text("fromscene")
    fav_username: str = _text("favusername")
    fav_create_time: str = _text("favcreatetime")
    is_chat_room: str = _text("isChatRoom")
    title: str = _text("title")
    desc: str = _text("desc")
    info: str = _text("info")
    data_list_count: str = _attr("datalist/count")
    data_items: list[DataItem] = _list("datalist/dataitem", lambda: DataItem)

    def to_text(self, title: str, host: str) -> str:
        """Render the record as indented text; image items link to ``host``."""
        title = title or self.title
        out = [f"[合并转发|{title}]\n"]
        for item in self.data_items:
            out.append(f"  {item.source_name} {item.source_time}\n")
            if item.data_type == "17" and item.record_xml is not None:
                content = item.record_xml.to_text(item.data_title, host)
                if content:
                    out.extend(f"  {line}\n" for line in content.split("\n"))
                continue
            if item.data_fmt in ("pic", "jpg"):
                out.append(f"  ![图片](http://{host}/image/{item.full_md5})\n")
            else:
                out.extend(f"  {line}\n" for line in item.data_desc.split("\n"))
            out.append("\n")
        return "".join(out)


@dataclass
class RecordItem:
    """Raw ``recorditem`` payload; ``record_info`` is filled in by callers."""

    cdata: str = _chardata()
    record_info: Optional[RecordInfo] = None


@dataclass
class PatRecord:
    from_user: str = _text("fromUser")
    patted_user: str = _text("pattedUser")
    templete: str = _text("templete")
    create_time: int = _int("createTime")
    svr_id: str = _text("svrId")
    read_status: int = _int("readStatus")


@dataclass
class PatMsg:
    """A "pat" notification."""

    chat_user: str = _text("chatUser")
    record_num: int = _int("recordNum")
    records: list[PatRecord] = _list("records/record", lambda: PatRecord)


@dataclass
class WCPayInfo:
    """Money transfer details."""

    pay_sub_type: int = _int("paysubtype")
    fee_desc: str = _text("feedesc")
    transcation_id: str = _text("transcationid")
    transfer_id: str = _text("transferid")
    invalid_time: str = _text("invalidtime")
    begin_transfer_time: str = _text("begintransfertime")
    effective_date: str = _text("effectivedate")
    pay_memo: str = _text("pay_memo")
    receiver_username: str = _text("receiver_username")
    payer_username: str = _text("payer_username")


@dataclass
class FinderMedia:
    thumb_url: str = _text("thumbUrl")
    full_cover_url: str = _text("fullCoverUrl")
    video_play_duration: str = _text("videoPlayDuration")
    url: str = _text("url")
    cover_url: str = _text("coverUrl")
    height: str = _text("height")
    media_type: str = _text("mediaType")
    full_clip_inset: str = _text("fullClipInset")
    width: str = _text("width")


@dataclass
class FinderFeed:
    """A shared channel video."""

    object_id: str = _text("objectId")
    feed_type: str = _text("feedType")
    nickname: str = _text("nickname")
    avatar: str = _text("avatar")
    desc: str = _text("desc")
    media_count: str = _text("mediaCount")
    object_nonce_id: str = _text("objectNonceId")
    live_id: str = _text("liveId")
    username: str = _text("username")
    auth_icon_url: str = _text("authIconUrl")
    auth_icon_type: int = _int("authIconType")
    contact_jump_info_str: str = _text("contactJumpInfoStr")
    source_comment_scene: int = _int("sourceCommentScene")
    media_list: list[FinderMedia] = _list("mediaList/media", lambda: FinderMedia)
    mega_video_object_id: str = _text("megaVideo/objectId")
    mega_video_object_nonce_id: str = _text("megaVideo/objectNonceId")
    biz_username: str = _text("bizUsername")
    biz_nickname: str = _text("bizNickname")
    biz_avatar: str = _text("bizAvatar")
    biz_username_v2: str = _text("bizUsernameV2")
    biz_auth_icon_url: str = _text("bizAuthIconUrl")
    biz_auth_icon_type: int = _int("bizAuthIconType")
    ec_source: str = _text("ecSource")
    last_g_msg_id: str = _text("lastGMsgID")
    share_byp_data: str = _text("shareBypData")
    is_debug: int = _int("isDebug")
    content_type: int = _int("content_type")
    finder_forward_source: str = _text("finderForwardSource")


@dataclass
class App:
    """An ``appmsg`` payload; which fields are set depends on ``type``."""

    type: int = _int("type")
    title: str = _text("title")
    des: str = _text("des")
    url: str = _text("url")  # 5: shared link
    app_attach: Optional[AppAttach] = _child("appattach", lambda: AppAttach)  # 6: file
    md5: str = _text("md5")  # 6: file
    record_item: Optional[RecordItem] = _child("recorditem", lambda: RecordItem)  # 19
    source_display_name: str = _text("sourcedisplayname")  # 33: mini program
    finder_feed: Optional[FinderFeed] = _child("finderFeed", lambda: FinderFeed)  # 51
    refer_msg: Optional[ReferMsg] = _child("refermsg", lambda: ReferMsg)  # 57: quote
    pat_msg: Optional[PatMsg] = _child("patMsg", lambda: PatMsg)  # 62: pat
    wc_pay_info: Optional[WCPayInfo] = _child("wcpayinfo", lambda: WCPayInfo)  # 2000


@dataclass
class MediaMsg:
    """Root ``<msg>`` element of a media or app message."""

    image: Image = _struct("img", Image)
    video: Video = _struct("videomsg", Video)
    app: App = _struct("appmsg", App)


# ---------------------------------------------------------------------------
# System message (<sysmsg>)
# ---------------------------------------------------------------------------

@dataclass
class Member:
    username: str = _text("username")
    nickname: str = _text("nickname")


@dataclass
class Link:
    name: str = _attr("name")
    type: str = _attr("type")
    members: list[Member] = _list("memberlist/member", lambda: Member)
    separator: str = _text("separator")
    title: str = _text("title")


@dataclass
class ContentTemplate:
    type: str = _attr("type")
    plain: str = _text("plain")
    template: str = _text("template")
    links: list[Link] = _list("link_list/link", lambda: Link)


@dataclass
class DelChatRoomMember:
    """Member removal or QR-code invitation notice."""

    plain: str = _text("plain")
    text: str = _text("text")
    link_scene: str = _text("link/scene")
    link_text: str = _text("link/text")
    link_usernames: list[str] = _list("link/memberlist/username", lambda: str)
    link_qrcode: str = _text("link/qrcode")


@dataclass
class SysMsg:
    """A system notice."""

    type: str = _attr("type")
    del_chat_room_member: Optional[DelChatRoomMember] = _child(
        "delchatroommember", lambda: DelChatRoomMember
    )
    template: Optional[ContentTemplate] = _child(
        "sysmsgtemplate/content_template", lambda: ContentTemplate
    )

    def to_text(self) -> str:
        if self.type == "delchatroommember":
            return self.del_chat_room_member_text()
        return self.template_text()

    def del_chat_room_member_text(self) -> str:
        if self.del_chat_room_member is None:
            return ""
        return self.del_chat_room_member.plain

    def template_text(self) -> str:
        """Fill the ``$name$`` placeholders of the template from its links."""
        if self.template is None:
            return ""
        replacements: dict[str, str] = {}
        for link in self.template.links:
            if link.type == "link_profile":
                separator = link.separator or "、"
                texts = []
                for member in link.members:
                    if not member.nickname:
                        continue
                    text = member.nickname
                    if member.username:
                        text += f"({member.username})"
                    texts.append(text)
                replacement = separator.join(texts)
            else:
                replacement = link.title
            replacements[f"${link.name}$"] = replacement

        def substitute(match: re.Match) -> str:
            return replacements.get(match.group(0), match.group(0))

        return _PLACEHOLDER_RE.sub(substitute, self.template.template)


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------

def parse_media_msg(data: Union[str, bytes]) -> MediaMsg:
    """Parse a ``<msg>`` document; raises ValueError on bad input."""
    return _decode(MediaMsg, _root(data, "msg"))


def parse_record_info(data: Union[str, bytes]) -> RecordInfo:
    """Parse a ``<recordinfo>`` document; raises ValueError on bad input."""
    return _decode(RecordInfo, _root(data, "recordinfo"))


def parse_sys_msg(data: Union[str, bytes]) -> SysMsg:
    """Parse a system message document; raises ValueError on bad input."""
    return _decode(SysMsg, _root(data))