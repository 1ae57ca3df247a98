import logging

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.core.errors import ConflictError, NotFoundError, ValidationError
from app.models.catalog import Content, Medicine
from app.schemas.catalog import ContentCreate, ContentUpdate, MedicineCreate, MedicineUpdate

logger = logging.getLogger(__name__)


def get_medicine(db: Session, medicine_id: int) -> Medicine:
    medicine = db.get(Medicine, medicine_id)
    if not medicine:
        raise NotFoundError(f"Medicine {medicine_id} not found")
    return medicine


def find_or_create_medicine(db: Session, name: str, hsn: str | None = None) -> Medicine:
    """Return the medicine with exactly this name, creating it on first reference."""
    cleaned = name.strip()
    if not cleaned:
        raise ValidationError("Medicine name is required")
    medicine = db.scalar(select(Medicine).where(Medicine.name == cleaned))
    if medicine:
        return medicine
    medicine = Medicine(name=cleaned, hsn=hsn.strip() if hsn else None)
    db.add(medicine)
    db.flush()
    logger.info("Created medicine %s (%s) on first reference", medicine.id, cleaned)
    return medicine


def _load_contents(db: Session, content_ids: list[int]) -> list[Content]:
    unique_ids = list(dict.fromkeys(content_ids))
    if not unique_ids:
        return []
    contents = list(db.scalars(select(Content).where(Content.id.in_(unique_ids)).order_by(Content.id)).all())
    if len(contents) != len(unique_ids):
        raise NotFoundError("Some contents not found")
    return contents


def list_medicines(db: Session) -> list[Medicine]:
    return list(db.scalars(select(Medicine).order_by(Medicine.name.asc())).all())


def search_medicines(db: Session, prefix: str, limit: int | None = None) -> list[Medicine]:
    query = select(Medicine).order_by(Medicine.name.asc())
    if prefix:
        query = query.where(func.lower(Medicine.name).like(f"{prefix.lower()}%"))
    if limit:
        query = query.limit(limit)
    return list(db.scalars(query).all())


def create_medicine(db: Session, payload: MedicineCreate) -> Medicine:
    name = payload.name.strip()
    if db.scalar(select(Medicine.id).where(Medicine.name == name)) is not None:
        raise ConflictError("Medicine name must be unique")
    medicine = Medicine(name=name, hsn=payload.hsn.strip() if payload.hsn else None)
    medicine.contents = _load_contents(db, payload.contents)
    db.add(medicine)
    db.commit()
    db.refresh(medicine)
    return medicine


def update_medicine(db: Session, medicine_id: int, payload: MedicineUpdate) -> Medicine:
    medicine = get_medicine(db, medicine_id)
    if payload.name is not None:
        name = payload.name.strip()
        clash = db.scalar(select(Medicine.id).where(Medicine.name == name, Medicine.id != medicine_id))
        if clash is not None:
            raise ConflictError("Medicine name must be unique")
        medicine.name = name
    if payload.hsn is not None:
        medicine.hsn = payload.hsn.strip() or None
    if payload.contents is not None:
        medicine.contents = _load_contents(db, payload.contents)
    db.commit()
    db.refresh(medicine)
    return medicine


def delete_medicine(db: Session, medicine_id: int) -> None:
    medicine = get_medicine(db, medicine_id)
    db.delete(medicine)
    db.commit()


def list_medicine_contents(db: Session, medicine_id: int) -> list[Content]:
    return list(get_medicine(db, medicine_id).contents)


def link_content(db: Session, medicine_id: int, content_id: int) -> Medicine:
    medicine = get_medicine(db, medicine_id)
    content = get_content(db, content_id)
    if content not in medicine.contents:
        medicine.contents.append(content)
        db.commit()
        db.refresh(medicine)
    return medicine


def unlink_content(db: Session, medicine_id: int, content_id: int) -> None:
    medicine = get_medicine(db, medicine_id)
    content = get_content(db, content_id)
    if content not in medicine.contents:
        raise NotFoundError("Content is not linked to this medicine")
    medicine.contents.remove(content)
    db.commit()


def get_content(db: Session, content_id: int) -> Content:
    content = db.get(Content, content_id)
    if not content:
        raise NotFoundError(f"Content {content_id} not found")
    return content


def list_contents(db: Session) -> list[Content]:
    return list(db.scalars(select(Content).order_by(Content.name.asc())).all())


def create_content(db: Session, payload: ContentCreate) -> Content:
    name = payload.name.strip()
    if db.scalar(select(Content.id).where(Content.name == name)) is not None:
        raise ConflictError("Content name must be unique")
    content = Content(name=name)
    db.add(content)
    db.commit()
    db.refresh(content)
    return content


def update_content(db: Session, content_id: int, payload: ContentUpdate) -> Content:
    content = get_content(db, content_id)
    if payload.name is not None:
        name = payload.name.strip()
        clash = db.scalar(select(Content.id).where(Content.name == name, Content.id != content_id))
        if clash is not None:
            raise ConflictError("Content name must be unique")
        content.name = name
    db.commit()
    db.refresh(content)
    return content


def delete_content(db: Session, content_id: int) -> None:
    content = get_content(db, content_id)
    db.delete(content)
    db.commit()
