"""Documents locked behind a code. Finding the code unlocks the text for the finder."""

import logging
import secrets
import string
from typing import Any, Optional

from sqlalchemy.orm import Session

from app.core.access import AccessResult, has_access_to, strip_object
from app.core.config import get_settings
from app.core.errors import AlreadyExists, InvalidData, NotAllowed
from app.core.permissions import is_user_allowed
from app.models import DocFile
from app.services import connector, manager
from app.services.messenger import ChangeType, EmitType, Messenger

logger = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_lowercase + string.digits
GENERATED_CODE_LENGTH = 8

_EDITABLE = {"title", "text", "code", "video_codes", "images", "owner_alias_id", "custom_time_created", "custom_last_updated"}


def generate_code() -> str:
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(GENERATED_CODE_LENGTH))


def _check_fields(values: dict[str, Any]) -> None:
    settings = get_settings()
    title = values.get("title")
    if title is not None and not settings.doc_file_title_min_length <= len(title) <= settings.doc_file_title_max_length:
        raise InvalidData(
            f"title must be {settings.doc_file_title_min_length}-{settings.doc_file_title_max_length} characters"
        )
    text = values.get("text")
    if text is not None and len("".join(text)) > settings.doc_file_max_length:
        raise InvalidData(f"text may be at most {settings.doc_file_max_length} characters")
    code = values.get("code")
    if code is not None:
        valid_length = settings.doc_file_code_min_length <= len(code) <= settings.doc_file_code_max_length
        if not valid_length or not code.isascii() or not code.isalnum():
            raise InvalidData(
                f"code must be alphanumeric, {settings.doc_file_code_min_length}-{settings.doc_file_code_max_length} characters"
            )


def _check_unique(db: Session, values: dict[str, Any], *, doc_file_id: Optional[str] = None) -> None:
    for field in ("title", "code"):
        if values.get(field) is None:
            continue
        existing = connector.find_object(db, DocFile, getattr(DocFile, field) == values[field])
        if existing is not None and existing.id != doc_file_id:
            raise AlreadyExists(f"Doc file with {field} {values[field]} already exists")


def locked_view(data: dict) -> dict:
    locked = strip_object(data)
    locked.pop("text", None)
    locked.pop("code", None)
    locked["images"] = []
    locked["videoCodes"] = []
    locked["isLocked"] = True
    return locked


def _broadcast_view(doc_file: DocFile) -> dict:
    data = doc_file.to_dict()
    return {**strip_object(data), "isLocked": False} if doc_file.is_public else locked_view(data)


def file_by_access(doc_file: DocFile, access: AccessResult) -> dict:
    """Full file for admins, stripped for readers, locked shell for everyone else."""
    data = doc_file.to_dict()
    if access.has_full_access:
        return {**data, "isLocked": False}
    if access.has_access:
        return {**strip_object(data), "isLocked": False}
    return locked_view(data)


def create_doc_file(
    db: Session,
    messenger: Messenger,
    user,
    *,
    title: str,
    text: list[str],
    code: Optional[str] = None,
    video_codes: Optional[list[str]] = None,
    images: Optional[list[dict]] = None,
    owner_alias_id: Optional[str] = None,
    visibility: int = 0,
    access_level: int = 0,
    is_public: bool = False,
) -> DocFile:
    is_user_allowed("CreateDocFile", user)
    values = {"title": title, "text": text or [], "code": code or generate_code()}
    _check_fields(values)
    manager.check_alias(user, owner_alias_id)
    if visibility > user.access_level or access_level > user.access_level:
        raise NotAllowed("Doc file visibility or access level above your own")
    _check_unique(db, values)
    doc_file = connector.save_object(
        db,
        DocFile(
            **values,
            video_codes=video_codes or [],
            images=images or [],
            owner_id=user.id,
            owner_alias_id=owner_alias_id,
            visibility=visibility,
            access_level=access_level,
            is_public=is_public,
        ),
    )
    messenger.emit_change(EmitType.DOCFILE, "docFile", _broadcast_view(doc_file), ChangeType.CREATE)
    logger.info("Doc file %s created by %s", doc_file.id, user.id)
    return doc_file


def get_doc_file(db: Session, doc_file_id: str, user) -> dict:
    is_user_allowed("GetDocFile", user)
    doc_file, access = manager.get_object_by_id(db, DocFile, doc_file_id, user)
    return file_by_access(doc_file, access)


def get_doc_files(db: Session, user) -> list[dict]:
    is_user_allowed("GetDocFile", user)
    out = []
    for doc_file in connector.get_objects(db, DocFile, order_by=DocFile.title):
        access = has_access_to(doc_file, user)
        if access.can_see:
            out.append(file_by_access(doc_file, access))
    return out


def unlock_doc_file(
    db: Session,
    messenger: Messenger,
    user,
    *,
    code: str,
    doc_file_id: Optional[str] = None,
    alias_id: Optional[str] = None,
) -> dict:
    """Grant the user (or alias) read access when the code matches."""
    is_user_allowed("GetDocFile", user)
    manager.check_alias(user, alias_id)
    if doc_file_id is not None:
        doc_file = connector.get_object(db, DocFile, doc_file_id)
    else:
        doc_file = connector.find_object(db, DocFile, DocFile.code == code)
    if doc_file is None or doc_file.code != code or doc_file.access_level > user.access_level:
        raise NotAllowed("Wrong code")

    reader_id = alias_id or user.id
    if reader_id not in (doc_file.user_ids or []):
        doc_file = connector.add_object_access(db, doc_file, user_ids=[reader_id])
    unlocked = file_by_access(doc_file, has_access_to(doc_file, user))
    messenger.emit_change(EmitType.DOCFILE, "docFile", unlocked, ChangeType.UPDATE, room=user.id)
    return unlocked


def update_doc_file(db: Session, messenger: Messenger, doc_file_id: str, user, updates: dict[str, Any]) -> DocFile:
    is_user_allowed("UpdateDocFile", user)
    allowed = {key: value for key, value in updates.items() if key in _EDITABLE}
    _check_fields(allowed)
    _check_unique(db, allowed, doc_file_id=doc_file_id)
    return manager.update_object(
        db, messenger, DocFile, doc_file_id, allowed, user, event=EmitType.DOCFILE, key="docFile", view=_broadcast_view
    )


def update_doc_file_access(db: Session, messenger: Messenger, doc_file_id: str, user, **kwargs) -> DocFile:
    is_user_allowed("UpdateDocFile", user)
    return manager.update_access(
        db, messenger, DocFile, doc_file_id, user, event=EmitType.DOCFILE, key="docFile", view=_broadcast_view, **kwargs
    )


def remove_doc_file(db: Session, messenger: Messenger, doc_file_id: str, user) -> dict:
    is_user_allowed("RemoveDocFile", user)
    return manager.remove_object(db, messenger, DocFile, doc_file_id, user, event=EmitType.DOCFILE, key="docFile")
