"""CRUD API for symbols."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from tickphysics.database import get_session
from tickphysics.models.symbol import Symbol
from tickphysics.schemas.symbol import SymbolCreate, SymbolUpdate, SymbolRead

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/symbols", tags=["symbols"])


def _name_taken(session: Session, name: str, exclude_id: int | None = None) -> bool:
    stmt = select(Symbol).where(Symbol.name == name)
    if exclude_id is not None:
        stmt = stmt.where(Symbol.id != exclude_id)
    return session.exec(stmt).first() is not None


@router.get("", response_model=list[SymbolRead])
def list_symbols(
    limit: int = 100,
    offset: int = 0,
    session: Session = Depends(get_session),
):
    stmt = select(Symbol).order_by(Symbol.name).offset(offset).limit(limit)
    return session.exec(stmt).all()


@router.post("", response_model=SymbolRead, status_code=201)
def create_symbol(
    data: SymbolCreate,
    session: Session = Depends(get_session),
):
    if _name_taken(session, data.name):
        raise HTTPException(status_code=409, detail="Symbol already exists")

    symbol = Symbol(**data.model_dump())
    session.add(symbol)
    session.commit()
    session.refresh(symbol)
    logger.info(f"Created symbol {symbol.name} (id={symbol.id})")
    return symbol


@router.get("/{symbol_id}", response_model=SymbolRead)
def get_symbol(symbol_id: int, session: Session = Depends(get_session)):
    symbol = session.get(Symbol, symbol_id)
    if not symbol:
        raise HTTPException(status_code=404, detail="Symbol not found")
    return symbol


@router.patch("/{symbol_id}", response_model=SymbolRead)
def update_symbol(
    symbol_id: int,
    data: SymbolUpdate,
    session: Session = Depends(get_session),
):
    symbol = session.get(Symbol, symbol_id)
    if not symbol:
        raise HTTPException(status_code=404, detail="Symbol not found")

    update_data = data.model_dump(exclude_unset=True)
    if update_data.get("name") is None:
        update_data.pop("name", None)
    elif _name_taken(session, update_data["name"], exclude_id=symbol_id):
        raise HTTPException(status_code=409, detail="Symbol name already in use")

    for key, value in update_data.items():
        setattr(symbol, key, value)

    session.add(symbol)
    session.commit()
    session.refresh(symbol)
    return symbol


@router.delete("/{symbol_id}", status_code=204)
def delete_symbol(symbol_id: int, session: Session = Depends(get_session)):
    symbol = session.get(Symbol, symbol_id)
    if not symbol:
        raise HTTPException(status_code=404, detail="Symbol not found")

    session.delete(symbol)
    session.commit()
    logger.info(f"Deleted symbol {symbol_id}")
