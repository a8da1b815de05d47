from typing import List
from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select
from taskboard.db.session import get_db
from taskboard.models.client import Client, ClientCreate, ClientUpdate
from taskboard.schemas.user import Identity
from taskboard.api import deps

router = APIRouter()


@router.get("", response_model=List[Client])
def list_clients(
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    current_user: Identity = Depends(deps.get_current_user),
):
    """
    Retrieve clients ordered by name. Clients are shared by all users.
    """
    statement = select(Client).order_by(Client.name).offset(skip).limit(limit)
    return db.exec(statement).all()


@router.get("/{client_id}", response_model=Client)
def read_client(
    client_id: str,
    db: Session = Depends(get_db),
    current_user: Identity = Depends(deps.get_current_user),
):
    client = db.get(Client, client_id)
    if not client:
        raise HTTPException(status_code=404, detail="Client not found")
    return client


@router.post("", response_model=Client)
def create_client(
    client_in: ClientCreate,
    db: Session = Depends(get_db),
    current_user: Identity = Depends(deps.get_current_admin),
):
    if not client_in.name.strip():
        raise HTTPException(status_code=422, detail="Client name is required")
    client = Client.model_validate(client_in)
    db.add(client)
    db.commit()
    db.refresh(client)
    return client


@router.patch("/{client_id}", response_model=Client)
def update_client(
    client_id: str,
    client_update: ClientUpdate,
    db: Session = Depends(get_db),
    current_user: Identity = Depends(deps.get_current_admin),
):
    client = db.get(Client, client_id)
    if not client:
        raise HTTPException(status_code=404, detail="Client not found")

    for key, value in client_update.model_dump(exclude_unset=True).items():
        setattr(client, key, value)

    db.add(client)
    db.commit()
    db.refresh(client)
    return client


@router.delete("/{client_id}")
def delete_client(
    client_id: str,
    db: Session = Depends(get_db),
    current_user: Identity = Depends(deps.get_current_admin),
):
    client = db.get(Client, client_id)
    if not client:
        raise HTTPException(status_code=404, detail="Client not found")

    db.delete(client)
    db.commit()
    return {"status": "success", "detail": "Client deleted"}
