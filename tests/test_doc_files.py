import pytest

from app.core.errors import AlreadyExists, InvalidData, NotAllowed
from app.core.permissions import AccessLevel
from app.services import doc_files
from app.services.messenger import Messenger


def _doc_file(db, owner, **kwargs):
    values = {"title": "Manifest", "text": ["The lanterns are lit."], "code": "lamp42", **kwargs}
    return doc_files.create_doc_file(db, Messenger(), owner, **values)


def test_locked_file_hides_text_and_code(db, make_user):
    owner = make_user("alice")
    reader = make_user("bob")
    doc_file = _doc_file(db, owner, video_codes=["abc"])

    locked = doc_files.get_doc_file(db, doc_file.id, reader)

    assert locked["isLocked"] is True
    assert "text" not in locked and "code" not in locked
    assert locked["videoCodes"] == []
    assert doc_files.get_doc_file(db, doc_file.id, owner)["code"] == "lamp42"


def test_generated_code_when_missing(db, make_user):
    doc_file = _doc_file(db, make_user("alice"), code=None)
    assert len(doc_file.code) == doc_files.GENERATED_CODE_LENGTH
    assert doc_file.code.isalnum()


@pytest.mark.parametrize("values", [{"title": "ab"}, {"code": "no!"}, {"text": ["x" * 3501]}])
def test_invalid_doc_file_fields(db, make_user, values):
    with pytest.raises(InvalidData):
        _doc_file(db, make_user("alice"), **values)


def test_duplicate_title_or_code(db, make_user):
    owner = make_user("alice")
    _doc_file(db, owner)
    with pytest.raises(AlreadyExists):
        _doc_file(db, owner, code="other1")
    with pytest.raises(AlreadyExists):
        _doc_file(db, owner, title="Other")


def test_unlock_with_code(db, make_user):
    owner = make_user("alice")
    reader = make_user("bob")
    doc_file = _doc_file(db, owner)

    with pytest.raises(NotAllowed):
        doc_files.unlock_doc_file(db, Messenger(), reader, code="wrong1", doc_file_id=doc_file.id)

    messenger = Messenger()
    unlocked = doc_files.unlock_doc_file(db, messenger, reader, code="lamp42")

    assert unlocked["isLocked"] is False
    assert unlocked["text"] == ["The lanterns are lit."]
    assert messenger.outbox[0].room == reader.id
    assert doc_files.get_doc_file(db, doc_file.id, reader)["isLocked"] is False


def test_unlock_respects_access_level(db, make_user):
    owner = make_user("admin", access_level=AccessLevel.ADMIN)
    doc_file = _doc_file(db, owner, access_level=AccessLevel.MODERATOR)
    with pytest.raises(NotAllowed):
        doc_files.unlock_doc_file(db, Messenger(), make_user("bob"), code="lamp42", doc_file_id=doc_file.id)


def test_update_broadcast_keeps_code_hidden(db, make_user):
    owner = make_user("alice")
    doc_file = _doc_file(db, owner)
    messenger = Messenger()

    doc_files.update_doc_file(db, messenger, doc_file.id, owner, {"text": ["New text"]})

    payload = messenger.outbox[0].data["data"]["docFile"]
    assert payload["isLocked"] is True
    assert "code" not in payload and "text" not in payload


def test_doc_file_endpoints(client, make_user, auth_headers):
    owner = make_user("alice")
    reader = make_user("bob")
    res = client.post(
        "/api/v1/docFiles",
        json={"data": {"title": "Manifest", "text": ["secret"], "code": "lamp42"}},
        headers=auth_headers(owner),
    )
    assert res.status_code == 200
    doc_file = res.json()["data"]["docFile"]

    res = client.get(f"/api/v1/docFiles/{doc_file['id']}", headers=auth_headers(reader))
    assert res.json()["data"]["docFile"]["isLocked"] is True

    res = client.post(
        f"/api/v1/docFiles/{doc_file['id']}/unlock", json={"data": {"code": "nope1"}}, headers=auth_headers(reader)
    )
    assert res.status_code == 401

    res = client.post("/api/v1/docFiles/unlock", json={"data": {"code": "lamp42"}}, headers=auth_headers(reader))
    assert res.status_code == 200
    assert res.json()["data"]["docFile"]["text"] == ["secret"]
