from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from tvboard.db import get_db
from tvboard.schemas.layout import LayoutIn, LayoutOut, LayoutRenameIn
from tvboard.schemas.screen import ScreenOut
from tvboard.services import layouts

router = APIRouter(prefix="/api/layouts", tags=["layouts"])


@router.get("", response_model=list[LayoutOut])
def list_layouts(db: Session = Depends(get_db)):
    return layouts.list_layouts(db)


@router.post("", response_model=LayoutOut)
def save_layout(payload: LayoutIn, db: Session = Depends(get_db)):
    return layouts.save_layout(db, payload.name, payload.tv1_url, payload.tv2_url, payload.tv3_url)


@router.get("/{layout_id}", response_model=LayoutOut)
def get_layout(layout_id: str, db: Session = Depends(get_db)):
    return layouts.get_layout(db, layout_id)


@router.post("/{layout_id}/restore", response_model=list[ScreenOut])
def restore_layout(layout_id: str, db: Session = Depends(get_db)):
    return layouts.restore_layout(db, layout_id)


@router.put("/{layout_id}", response_model=LayoutOut)
def rename_layout(layout_id: str, payload: LayoutRenameIn, db: Session = Depends(get_db)):
    return layouts.rename_layout(db, layout_id, payload.name)


@router.delete("/{layout_id}")
def delete_layout(layout_id: str, db: Session = Depends(get_db)):
    layouts.delete_layout(db, layout_id)
    return {"ok": True}
