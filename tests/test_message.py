from datetime import datetime

import pytest

from chatlog.mediamessage import RecordInfo
from chatlog.message import (
    SYSTEM_SENDER,
    WECHAT_DARWIN_V3,
    Message,
    MessageDarwinV3,
    split_type,
)


def _app(inner: str) -> str:
    return f"<msg><appmsg>{inner}</appmsg></msg>"


def test_split_type_packs_sub_type_in_high_bits():
    assert split_type((5 << 32) | 49) == (49, 5)
    assert split_type(1) == (1, 0)


def test_text_message_keeps_data():
    m = Message(type=1)
    m.parse_media_info("hello there")
    assert m.content == "hello there"
    assert m.plain_text_content() == "hello there"


def test_packed_type_is_split_on_parse():
    m = Message(type=(7 << 32) | 1)
    m.parse_media_info("x")
    assert (m.type, m.sub_type) == (1, 7)


def test_system_message_template():
    xml = (
        '<sysmsg type="sysmsgtemplate"><sysmsgtemplate>'
        '<content_template type="tmpl_type_profile">'
        "<template>$names$ joined</template>"
        '<link_list><link name="names" type="link_profile"><memberlist>'
        "<member><username>u1</username><nickname>Ann</nickname></member>"
        "</memberlist></link></link_list>"
        "</content_template></sysmsgtemplate></sysmsg>"
    )
    m = Message(type=10000, sender="someone", sender_name="Someone")
    m.parse_media_info(xml)
    assert m.sender == SYSTEM_SENDER
    assert m.sender_name == ""
    assert m.content == "Ann(u1) joined"


def test_system_message_invalid_xml_keeps_raw():
    m = Message(type=10000, sender="someone")
    m.parse_media_info("not xml <")
    assert m.content == "not xml <"
    assert m.sender == "someone"


def test_invalid_media_xml_raises():
    m = Message(type=3)
    with pytest.raises(ValueError):
        m.parse_media_info("<<broken")


def test_image_md5_and_rendering():
    m = Message(type=3)
    m.parse_media_info('<msg><img md5="abc123"/></msg>')
    assert m.contents["md5"] == "abc123"
    m.set_content("host", "h:1")
    assert m.plain_text_content() == "![图片](http://h:1/image/abc123)"


def test_video_keys_joined():
    m = Message(type=43)
    m.parse_media_info('<msg><videomsg md5="v1" rawmd5="v2"/></msg>')
    assert m.contents["md5"] == "v1"
    assert m.contents["rawmd5"] == "v2"
    m.set_content("host", "h")
    assert m.plain_text_content() == "![视频](http://h/video/v1,v2)"


def test_video_empty_md5_not_stored():
    m = Message(type=43)
    m.parse_media_info("<msg><videomsg/></msg>")
    assert "md5" not in m.contents
    assert "rawmd5" not in m.contents


def test_link_message():
    m = Message(type=49)
    m.parse_media_info(_app("<type>5</type><title>T</title><url>U</url>"))
    assert m.sub_type == 5
    assert m.plain_text_content() == "[链接|T](U)"


def test_file_message():
    m = Message(type=49)
    m.parse_media_info(_app("<type>6</type><title>a.txt</title><md5>ff</md5>"))
    m.set_content("host", "h")
    assert m.plain_text_content() == "[文件|a.txt](http://h/file/ff)"


def test_mini_program_without_title():
    m = Message(type=49)
    m.parse_media_info(_app("<type>33</type>"))
    assert m.plain_text_content() == "[小程序]"


def test_finder_feed():
    m = Message(type=49)
    m.parse_media_info(
        _app(
            "<type>51</type><finderFeed><desc>D</desc>"
            "<mediaList><media><url>V</url></media></mediaList></finderFeed>"
        )
    )
    assert m.contents["title"] == "D"
    assert m.plain_text_content() == "[视频号|D](V)"


def test_quote_message():
    m = Message(type=49)
    m.parse_media_info(
        _app(
            "<type>57</type><title>reply</title><refermsg><type>1</type>"
            "<chatusr>wxid_a</chatusr><displayname>Alice</displayname>"
            "<content>hello</content><createtime>0</createtime></refermsg>"
        )
    )
    assert m.content == "reply"
    refer = m.contents["refer"]
    assert isinstance(refer, Message)
    assert refer.sender == "wxid_a"
    assert refer.content == "hello"
    text = m.plain_text_content()
    assert text.endswith("reply")
    body = [line for line in text.split("\n")[:-1]]
    assert all(line.startswith("> ") for line in body)
    assert "> hello" in body


def test_quote_falls_back_to_from_usr():
    m = Message(type=49)
    m.parse_media_info(
        _app(
            "<type>57</type><title>r</title><refermsg><type>1</type>"
            "<fromusr>wxid_b</fromusr><content>x</content></refermsg>"
        )
    )
    assert m.contents["refer"].sender == "wxid_b"


def test_quote_without_refer():
    m = Message(type=49)
    m.parse_media_info(_app("<type>57</type><title>only</title>"))
    assert m.plain_text_content() == "> [引用]\nonly"


def test_pat_message():
    m = Message(type=49)
    m.parse_media_info(
        _app(
            "<type>62</type><patMsg><records><record>"
            "<fromUser>wxid_c</fromUser><templete>patted you</templete>"
            "</record></records></patMsg>"
        )
    )
    assert m.sender == "wxid_c"
    assert m.plain_text_content() == "patted you"


@pytest.mark.parametrize(
    "sub_type, direction",
    [(1, "发送 "), (7, "发送 "), (3, "接收 "), (5, "接收 "), (4, "退还 "), (9, "")],
)
def test_transfer_message(sub_type, direction):
    m = Message(type=49)
    m.parse_media_info(
        _app(
            f"<type>2000</type><wcpayinfo><paysubtype>{sub_type}</paysubtype>"
            "<feedesc>￥1.00</feedesc><pay_memo>note</pay_memo></wcpayinfo>"
        )
    )
    assert m.content == f"[转账|{direction}￥1.00](note)"


def test_record_message_renders_record():
    record = (
        "<recordinfo><title>R</title><datalist count='1'>"
        "<dataitem datatype='1'><sourcename>Bob</sourcename>"
        "<sourcetime>t</sourcetime><datadesc>hi</datadesc></dataitem>"
        "</datalist></recordinfo>"
    )
    escaped = record.replace("<", "&lt;").replace(">", "&gt;")
    m = Message(type=49)
    m.parse_media_info(_app(f"<type>19</type><title>T</title><recorditem>{escaped}</recorditem>"))
    info = m.contents["recordInfo"]
    assert isinstance(info, RecordInfo)
    m.set_content("host", "h")
    assert m.plain_text_content() == info.to_text("", "h")


def test_record_message_bad_record_raises():
    m = Message(type=49)
    with pytest.raises(ValueError):
        m.parse_media_info(_app("<type>19</type><recorditem>oops</recorditem>"))


@pytest.mark.parametrize(
    "type_, expected", [(42, "[名片]"), (47, "[动画表情]"), (50, "[语音通话]"), (34, "[语音]")]
)
def test_fixed_placeholders(type_, expected):
    assert Message(type=type_).plain_text_content() == expected


def test_voice_with_id():
    m = Message(type=34, contents={"voice": "42", "host": "h"})
    assert m.plain_text_content() == "[语音](http://h/voice/42)"


def test_unknown_type_truncated():
    m = Message(type=9999, content="a" * 200)
    text = m.plain_text_content()
    assert text.endswith("<...>")
    assert ("a" * 120 + "<...>") in text
    assert "a" * 121 not in text


def test_plain_text_header():
    when = datetime(2024, 1, 2, 3, 4, 5)
    m = Message(
        type=1,
        content="body",
        sender="wxid_s",
        sender_name="Sam",
        talker="room@chatroom",
        talker_name="Room",
        is_chat_room=True,
        time=when,
    )
    text = m.plain_text(True, "", "h")
    assert text == f"Sam(wxid_s) [Room(room@chatroom)] {when.strftime('%m-%d %H:%M:%S')}\nbody\n"
    assert m.contents["host"] == "h"
    hidden = m.plain_text(False, "%Y", "h")
    assert hidden == "Sam(wxid_s) 2024\nbody\n"


def test_plain_text_self():
    m = Message(type=1, content="c", sender="wxid_s", is_self=True, time=datetime(2024, 1, 1))
    assert m.plain_text(False, "%Y", "h").startswith("我 2024\n")


def test_set_content():
    m = Message()
    m.set_content("k", 5)
    assert m.contents == {"k": 5}


def test_darwin_chat_room_splits_sender():
    row = MessageDarwinV3(msg_create_time=1700000000, msg_content="wxid_x:\nhi", message_type=1, mes_des=1)
    m = row.wrap("g@chatroom")
    assert m.is_chat_room
    assert m.sender == "wxid_x"
    assert m.content == "hi"
    assert m.version == WECHAT_DARWIN_V3
    assert m.time == datetime.fromtimestamp(1700000000)


def test_darwin_private_received_and_sent():
    received = MessageDarwinV3(msg_content="yo", message_type=1, mes_des=1).wrap("wxid_p")
    assert received.sender == "wxid_p"
    assert not received.is_self
    sent = MessageDarwinV3(msg_content="yo", message_type=1, mes_des=0).wrap("wxid_p")
    assert sent.sender == ""
    assert sent.is_self


def test_darwin_bad_media_is_ignored():
    m = MessageDarwinV3(msg_content="<<", message_type=3, mes_des=1).wrap("wxid_p")
    assert m.type == 3
    assert m.contents == {}