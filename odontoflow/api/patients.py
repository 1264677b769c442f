"""Patient record store: list, create, read, partial update, delete."""
import logging
from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session
from typing import List, Optional

from ..models.base import get_db, generate_uuid
from ..models.patient import Patient
from ..core.security import get_current_user
from ..schemas import PatientPayload, PatientRecord, PatientUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/patients", tags=["patients"])


def _get_or_404(db: Session, patient_id: str) -> Patient:
    patient = db.query(Patient).filter(Patient.id == patient_id).first()
    if not patient:
        raise HTTPException(status_code=404, detail="Patient not found")
    return patient


@router.get("/", response_model=List[PatientRecord])
def list_patients(
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    """All patient records, newest first."""
    return db.query(Patient).order_by(Patient.created_at.desc()).all()


@router.post("/", response_model=PatientRecord, status_code=status.HTTP_201_CREATED)
def create_patient(
    patient_in: PatientPayload,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    patient = Patient(id=generate_uuid(), **patient_in.model_dump())
    db.add(patient)
    db.commit()
    db.refresh(patient)
    logger.info("Patient %s created by %s", patient.id, current_user.id)
    return patient


@router.get("/{patient_id}", response_model=PatientRecord)
def get_patient(
    patient_id: str,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return _get_or_404(db, patient_id)


@router.patch("/{patient_id}", response_model=PatientRecord)
def update_patient(
    patient_id: str,
    changes: PatientUpdate,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    """Replace the supplied fields; id and created_at never change."""
    patient = _get_or_404(db, patient_id)
    for field_name, value in changes.model_dump(exclude_unset=True).items():
        if value is None and field_name != "notes":
            continue
        setattr(patient, field_name, value)
    db.commit()
    db.refresh(patient)
    return patient


@router.delete("/{patient_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_patient(
    patient_id: str,
    confirm_name: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    """
    Delete a record. Deleting an id that no longer exists succeeds.
    When confirm_name is given it must equal the stored name exactly.
    """
    patient = db.query(Patient).filter(Patient.id == patient_id).first()
    if patient is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    if confirm_name is not None and confirm_name != patient.name:
        raise HTTPException(status_code=409, detail="Confirmation name does not match the patient record")
    db.delete(patient)
    db.commit()
    logger.info("Patient %s deleted by %s", patient_id, current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
