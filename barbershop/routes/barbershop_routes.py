from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from barbershop.auth.dependencies import get_current_user
from barbershop.database import get_db
from barbershop.models.barbershop import Barbershop, BarbershopService
from barbershop.models.user import User
from barbershop.routes.deps import DATABASE_UNAVAILABLE_DETAIL
from barbershop.routes.schemas import BarbershopResponse, BarbershopSummaryResponse, OwnedBarbershopResponse

router = APIRouter(tags=['barbershops'])


@router.get('', response_model=list[BarbershopSummaryResponse])
def list_barbershops(
    search: str | None = Query(default=None, max_length=100),
    db: Session = Depends(get_db),
):
    try:
        query = db.query(Barbershop)

        term = (search or '').strip()
        if term:
            query = query.filter(
                or_(
                    Barbershop.name.icontains(term, autoescape=True),
                    Barbershop.services.any(BarbershopService.name.icontains(term, autoescape=True)),
                )
            )

        return query.order_by(Barbershop.name.asc()).all()
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE_DETAIL,
        ) from exc


@router.get('/mine', response_model=list[OwnedBarbershopResponse])
def list_my_barbershops(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        return db.query(Barbershop).filter(
            Barbershop.owner_id == current_user.id,
        ).order_by(Barbershop.name.asc()).all()
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE_DETAIL,
        ) from exc


@router.get('/{barbershop_id}', response_model=BarbershopResponse)
def get_barbershop(barbershop_id: str, db: Session = Depends(get_db)):
    try:
        barbershop = db.query(Barbershop).options(
            selectinload(Barbershop.services),
        ).filter(Barbershop.id == barbershop_id).first()
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE_DETAIL,
        ) from exc

    if barbershop is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail='Barbershop not found.',
        )

    return barbershop
