from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from app.api.deps import CurrentUser, require_app_admin
from app.db.database import get_db
from app.schemas.catalog import (
    ContentCreate,
    ContentOut,
    ContentUpdate,
    MedicineContentLink,
    MedicineCreate,
    MedicineOut,
    MedicineUpdate,
)
from app.services import catalog

router = APIRouter(tags=["Catalog"])


@router.get("/medicines", response_model=list[MedicineOut])
def list_medicines(
    _: CurrentUser = Depends(require_app_admin),
    db: Session = Depends(get_db),
):
    return catalog.list_medicines(db)


@router.get("/medicines/search", response_model=list[MedicineOut])
def search_medicines(
    q: str = "",
    limit: int | None = Query(default=None, ge=1, le=200),
    _: CurrentUser = Depends(require_app_admin),
    db: Session = Depends(get_db),
):
    return catalog.search_medicines(db, q, limit)


@router.post("/medicines", response_model=MedicineOut, status_code=status.HTTP_201_CREATED)
def create_medicine(
    payload: MedicineCreate,
    _: CurrentUser = Depends(require_app_admin),
    db: Session = Depends(get_db),
):
    return catalog.create_medicine(db, payload)


@router.get("/medicines/{medicine_id}", response_model=MedicineOut)
def get_medicine(
    medicine_id: int,
    _: CurrentUser = Depends(require_app_admin),
    db: Session = Depends(get_db),
):
    return catalog.get_medicine(db, medicine_id)


@router.put("/medicines/{medicine_id}", response_model=MedicineOut)
def update_medicine(
    medicine_id: int,
    payload: MedicineUpdate,
    _: CurrentUser = Depends(require_app_admin),
    db: Session = Depends(get_db),
):
    return catalog.update_medicine(db, medicine_id, payload)


@router.delete("/medicines/{medicine_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_medicine(
    medicine_id: int,
    _: CurrentUser = Depends(require_app_admin),
    db: Session = Depends(get_db),
):
    catalog.delete_medicine(db, medicine_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/medicines/{medicine_id}/contents", response_model=list[ContentOut])
def list_medicine_contents(
    medicine_id: int,
    _: CurrentUser = Depends(require_app_admin),
    db: Session = Depends(get_db),
):
    return catalog.list_medicine_contents(db, medicine_id)


@router.post("/medicines/{medicine_id}/contents", response_model=MedicineOut, status_code=status.HTTP_201_CREATED)
def link_medicine_content(
    medicine_id: int,
    payload: MedicineContentLink,
    _: CurrentUser = Depends(require_app_admin),
    db: Session = Depends(get_db),
):
    return catalog.link_content(db, medicine_id, payload.content_id)


@router.delete("/medicines/{medicine_id}/contents/{content_id}", status_code=status.HTTP_204_NO_CONTENT)
def unlink_medicine_content(
    medicine_id: int,
    content_id: int,
    _: CurrentUser = Depends(require_app_admin),
    db: Session = Depends(get_db),
):
    catalog.unlink_content(db, medicine_id, content_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/contents", response_model=list[ContentOut])
def list_contents(
    _: CurrentUser = Depends(require_app_admin),
    db: Session = Depends(get_db),
):
    return catalog.list_contents(db)


@router.post("/contents", response_model=ContentOut, status_code=status.HTTP_201_CREATED)
def create_content(
    payload: ContentCreate,
    _: CurrentUser = Depends(require_app_admin),
    db: Session = Depends(get_db),
):
    return catalog.create_content(db, payload)


@router.put("/contents/{content_id}", response_model=ContentOut)
def update_content(
    content_id: int,
    payload: ContentUpdate,
    _: CurrentUser = Depends(require_app_admin),
    db: Session = Depends(get_db),
):
    return catalog.update_content(db, content_id, payload)


@router.delete("/contents/{content_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_content(
    content_id: int,
    _: CurrentUser = Depends(require_app_admin),
    db: Session = Depends(get_db),
):
    catalog.delete_content(db, content_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
