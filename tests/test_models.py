from core.models import (
    IncomingFile, Notification, StoredObject, build_object_key, parse_object_key
)


def test_build_object_key_prefixes_timestamp():
    assert build_object_key("cat.png", 1722250000123) == "1722250000123-cat.png"

def test_build_object_key_uses_current_time():
    timestamp, name = parse_object_key(build_object_key("my photo.jpg"))
    assert name == "my photo.jpg"
    assert timestamp > 1_600_000_000_000

def test_parse_object_key_keeps_dashes_in_filename():
    assert parse_object_key("1722250000123-summer-2024.png") == (1722250000123, "summer-2024.png")

def test_parse_object_key_without_timestamp():
    assert parse_object_key("avatar.png") == (None, "avatar.png")
    assert parse_object_key("abc-avatar.png") == (None, "abc-avatar.png")

def test_incoming_file_guesses_type_from_name():
    assert IncomingFile.from_path("/tmp/gradio/x1/cat.PNG").content_type == "image/png"
    assert IncomingFile.from_path("/tmp/gradio/x1/cat.png").name == "cat.png"
    assert not IncomingFile.from_path("/tmp/gradio/x1/report.pdf").is_image

def test_incoming_file_explicit_type_wins():
    f = IncomingFile.from_path("/tmp/upload", name="scan", content_type="image/tiff")
    assert f.is_image
    assert f.name == "scan"

def test_notification_variants():
    assert Notification(title="Image deleted").is_error is False
    assert Notification(title="Delete failed", variant="destructive").is_error is True

def test_stored_object_is_file():
    assert StoredObject(name="1-a.png", id="x").is_file
    assert not StoredObject(name="folder", id=None).is_file
    assert not StoredObject(name=".emptyFolderPlaceholder", id="y").is_file
