# chatlog

This package holds data models for chat history records. The records come from
the databases of three desktop client layouts: v3, v4 and macOS v3. Each raw
row type has a `wrap()` method that turns it into one common model. The common
models can render themselves as readable plain text.

## Install

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Modules

- `chatlog.contact`
  - `Contact` is the common model.
  - `ContactV3`, `ContactDarwinV3` and `ContactV4` are the raw rows.
  - `Contact.display_name()` returns the remark if there is one, otherwise the nickname.
  - `is_friend` is worked out from each layout's own flag.
- `chatlog.session`
  - `Session` is the common model; `SessionV3`, `SessionDarwinV3` and `SessionV4` are the raw rows.
  - `Session.plain_text(limit)` prints the nickname, the user name and the time.
  - It then prints up to `limit` UTF-8 bytes of the last message. Longer content is cut and marked with ` <...>`.
- `chatlog.media`
  - `Media` is the common model; `MediaV3`, `MediaDarwinV3` and `MediaV4` are the raw rows.
  - Each `wrap()` builds the relative storage path of the image, video or file.
- `chatlog.chatroom`
  - `ChatRoom` and `ChatRoomUser` are the common models.
  - `ChatRoomV3`, `ChatRoomDarwinV3` and `ChatRoomV4` are the raw rows.
  - The v3 and v4 rows decode the member list from the room's protobuf blob.
  - The macOS row splits a `;`-separated member list. It takes display names from the mapping passed to `wrap()`.
- `chatlog.mediamessage`
  - Dataclasses for the XML payloads of media, app and system messages.
  - `parse_media_msg`, `parse_record_info` and `parse_sys_msg` read them and raise `ValueError` on bad input.
  - `RecordInfo.to_text(title, host)` renders a forwarded chat history, including nested ones.
  - `SysMsg.to_text()` fills in the `$name$` placeholders of a system message template.
- `chatlog.message`
  - `Message` is the common message model.
  - `Message.parse_media_info(data)` decodes a payload according to the message type: text, image, video, voice, link, file, forwarded record, mini program, channel video, quote, pat or transfer.
  - `Message.plain_text(show_chat_room, time_format, host)` renders a header line and the body. `time_format` is a `strftime` format; an empty string means month-day and time. Media links point at `host`.
  - `split_type(value)` splits a packed type into `(type, sub_type)`.
  - `MessageDarwinV3` is the macOS raw row.
- `chatlog.message_v3`
  - `MessageV3` decompresses LZ4 app content.
  - It reads the sender and the video path from the extra protobuf data.
- `chatlog.message_v4`
  - `MessageV4` decompresses zstd content.
  - It derives image and video paths from the packed info blob. `PackedMedia` holds the hash found there.
- `chatlog.style`
  - `Color` is the terminal colour type, and `color_name(color)` and `color_hex(color)` convert a colour.
  - `UNIX_PALETTE` and `WINDOWS_PALETTE` are the palettes of the user interface.
  - `PALETTE` is the one chosen for the current platform.

## Example

```python
from chatlog.contact import ContactV4
from chatlog.message import MessageDarwinV3

contact = ContactV4(user_name="wxid_example", nick_name="Alice", local_type=1).wrap()
print(contact.display_name(), contact.is_friend)  # Alice True

row = MessageDarwinV3(msg_create_time=1700000000, msg_content="hello", message_type=1, mes_des=1)
message = row.wrap("wxid_example")
print(message.plain_text(False, "", "localhost:5030"))
```

## What this package does not do

The package only models records and renders them as text. It does not:

- find, open or decrypt the client databases;
- run queries against the databases;
- serve messages over HTTP;
- provide a command or a terminal user interface.

`chatlog.style` defines the colours for such an interface, but no interface is included. Rows have to be read by the caller and passed to the raw row classes.