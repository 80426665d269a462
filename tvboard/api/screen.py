from datetime import datetime
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from tvboard.db import get_db
from tvboard.schemas.screen import (
    ScreenImageIn,
    ScreenOrderIn,
    ScreenOut,
    ShowNumbersIn,
    ShowNumbersOut,
    TriggerReloadIn,
    TriggerReloadOut,
)
from tvboard.services import screens
from tvboard.services.signals import ViewerSignals, get_signals

router = APIRouter(prefix="/api/screens", tags=["screens"])


@router.get("", response_model=list[ScreenOut])
def list_screens(db: Session = Depends(get_db)):
    return screens.list_screens(db)


@router.get("/updates", response_model=list[ScreenOut])
def list_updates(since: datetime | None = None, db: Session = Depends(get_db)):
    return screens.changes_since(db, since)


@router.put("/order", response_model=list[ScreenOut])
def update_order(updates: list[ScreenOrderIn], db: Session = Depends(get_db)):
    return screens.reorder_screens(db, [(item.id, item.position) for item in updates])


@router.post("/reset", response_model=list[ScreenOut])
def reset_all_images(db: Session = Depends(get_db)):
    return screens.reset_all_screens(db)


@router.get("/show-numbers", response_model=ShowNumbersOut)
def get_show_numbers(signals: ViewerSignals = Depends(get_signals)):
    return {"show_tv_numbers": signals.show_tv_numbers}


@router.put("/show-numbers", response_model=ShowNumbersOut)
def set_show_numbers(payload: ShowNumbersIn, signals: ViewerSignals = Depends(get_signals)):
    return {"show_tv_numbers": signals.set_show_tv_numbers(payload.show)}


@router.get("/trigger-reload", response_model=TriggerReloadOut)
def get_trigger_reload(signals: ViewerSignals = Depends(get_signals)):
    return {"trigger_reload": signals.trigger_reload}


@router.put("/trigger-reload", response_model=TriggerReloadOut)
def set_trigger_reload(payload: TriggerReloadIn, signals: ViewerSignals = Depends(get_signals)):
    return {"trigger_reload": signals.set_trigger_reload(payload.trigger)}


@router.put("/{screen_id}/image", response_model=ScreenOut)
def update_image(screen_id: str, payload: ScreenImageIn, db: Session = Depends(get_db)):
    return screens.set_screen_image(db, screen_id, payload.image_url)


@router.post("/{screen_id}/reset", response_model=ScreenOut)
def reset_image(screen_id: str, db: Session = Depends(get_db)):
    return screens.reset_screen_image(db, screen_id)
