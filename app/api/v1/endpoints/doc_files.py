from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.dependencies import CurrentUser, get_current_user, get_messenger
from app.schemas.common import AccessUpdate, DataRequest, envelope
from app.schemas.doc_file import DocFileCreate, DocFileUnlock, DocFileUpdate
from app.services import doc_files
from app.services.messenger import Messenger

router = APIRouter()


@router.post("")
def create_doc_file(
    payload: DataRequest[DocFileCreate],
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    messenger: Messenger = Depends(get_messenger),
):
    doc_file = doc_files.create_doc_file(db, messenger, user, **payload.data.model_dump())
    return envelope({"docFile": {**doc_file.to_dict(), "isLocked": False}})


@router.get("")
def list_doc_files(user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return envelope({"docFiles": doc_files.get_doc_files(db, user)})


@router.post("/unlock")
def unlock_by_code(
    payload: DataRequest[DocFileUnlock],
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    messenger: Messenger = Depends(get_messenger),
):
    doc_file = doc_files.unlock_doc_file(db, messenger, user, code=payload.data.code, alias_id=payload.data.alias_id)
    return envelope({"docFile": doc_file})


@router.get("/{doc_file_id}")
def get_doc_file(doc_file_id: str, user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return envelope({"docFile": doc_files.get_doc_file(db, doc_file_id, user)})


@router.post("/{doc_file_id}/unlock")
def unlock_doc_file(
    doc_file_id: str,
    payload: DataRequest[DocFileUnlock],
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    messenger: Messenger = Depends(get_messenger),
):
    doc_file = doc_files.unlock_doc_file(
        db, messenger, user, code=payload.data.code, doc_file_id=doc_file_id, alias_id=payload.data.alias_id
    )
    return envelope({"docFile": doc_file})


@router.put("/{doc_file_id}")
def update_doc_file(
    doc_file_id: str,
    payload: DataRequest[DocFileUpdate],
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    messenger: Messenger = Depends(get_messenger),
):
    doc_file = doc_files.update_doc_file(db, messenger, doc_file_id, user, payload.data.model_dump(exclude_unset=True))
    return envelope({"docFile": doc_file.to_dict()})


@router.put("/{doc_file_id}/access")
def update_doc_file_access(
    doc_file_id: str,
    payload: DataRequest[AccessUpdate],
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    messenger: Messenger = Depends(get_messenger),
):
    doc_file = doc_files.update_doc_file_access(db, messenger, doc_file_id, user, **payload.data.model_dump(exclude_unset=True))
    return envelope({"docFile": doc_file.to_dict()})


@router.delete("/{doc_file_id}")
def remove_doc_file(
    doc_file_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    messenger: Messenger = Depends(get_messenger),
):
    return envelope({"docFile": doc_files.remove_doc_file(db, messenger, doc_file_id, user)})
