from awaybot.bus.payloads import (
    ButtonReply,
    ImageCaption,
    PlainText,
    QuotedText,
    Unsupported,
    VideoCaption,
    parse_payload,
)


def test_plain_conversation():
    payload = parse_payload({"conversation": "halo"})
    assert payload == PlainText("halo")
    assert payload.text == "halo"


def test_extended_text():
    payload = parse_payload({"extendedTextMessage": {"text": "lihat ini", "contextInfo": {}}})
    assert payload == QuotedText("lihat ini")


def test_media_captions():
    assert parse_payload({"imageMessage": {"caption": "foto"}}) == ImageCaption("foto")
    assert parse_payload({"videoMessage": {"caption": "video"}}) == VideoCaption("video")


def test_media_without_caption_is_unsupported():
    payload = parse_payload({"imageMessage": {"url": "https://example.invalid/x"}})
    assert isinstance(payload, Unsupported)
    assert payload.kind == "imageMessage"
    assert payload.text is None


def test_button_response():
    payload = parse_payload({
        "buttonsResponseMessage": {"selectedButtonId": "assist_no", "selectedDisplayText": "Tidak"}
    })
    assert payload == ButtonReply(selected_id="assist_no", display_text="Tidak")
    assert payload.text == "Tidak"


def test_template_and_list_responses():
    template = parse_payload({"templateButtonReplyMessage": {"selectedId": "assist_yes"}})
    listed = parse_payload({"listResponseMessage": {"singleSelectReply": {"selectedRowId": "assist_no"}}})

    assert template == ButtonReply(selected_id="assist_yes")
    assert listed.selected_id == "assist_no"


def test_empty_or_missing_message():
    assert isinstance(parse_payload(None), Unsupported)
    assert isinstance(parse_payload({}), Unsupported)
    assert isinstance(parse_payload({"conversation": ""}), Unsupported)
