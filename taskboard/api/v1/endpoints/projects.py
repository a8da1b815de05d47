"""
Project Endpoints Module

This module provides CRUD endpoints for managing projects. Any authenticated user
can read projects; only administrators can create, modify or delete them.
"""
from typing import List
from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select
from taskboard.db.session import get_db
from taskboard.models.project import Project, ProjectCreate, ProjectUpdate
from taskboard.schemas.user import Identity
from taskboard.api import deps

router = APIRouter()


@router.get("", response_model=List[Project])
def list_projects(
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    current_user: Identity = Depends(deps.get_current_user),
):
    """
    Retrieve a paginated list of projects ordered by name.

    Args:
        skip: Number of records to skip (for pagination)
        limit: Maximum number of records to return
        db: Database session
        current_user: Currently authenticated user

    Returns:
        List[Project]: List of project objects
    """
    statement = select(Project).order_by(Project.name).offset(skip).limit(limit)
    return db.exec(statement).all()


@router.get("/{project_id}", response_model=Project)
def read_project(
    project_id: str,
    db: Session = Depends(get_db),
    current_user: Identity = Depends(deps.get_current_user),
):
    """
    Get a specific project by ID.

    Raises:
        HTTPException 404: If the project doesn't exist
    """
    project = db.get(Project, project_id)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    return project


@router.post("", response_model=Project)
def create_project(
    project_in: ProjectCreate,
    db: Session = Depends(get_db),
    current_user: Identity = Depends(deps.get_current_admin),
):
    """
    Create a new project.
    """
    if not project_in.name.strip():
        raise HTTPException(status_code=422, detail="Project name is required")
    project = Project.model_validate(project_in)
    db.add(project)
    db.commit()
    db.refresh(project)
    return project


@router.patch("/{project_id}", response_model=Project)
def update_project(
    project_id: str,
    project_update: ProjectUpdate,
    db: Session = Depends(get_db),
    current_user: Identity = Depends(deps.get_current_admin),
):
    """
    Update an existing project. Only the fields sent are changed.

    Raises:
        HTTPException 404: If the project doesn't exist
    """
    project = db.get(Project, project_id)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")

    # Apply updates to the project
    for key, value in project_update.model_dump(exclude_unset=True).items():
        setattr(project, key, value)

    db.add(project)
    db.commit()
    db.refresh(project)
    return project


@router.delete("/{project_id}")
def delete_project(
    project_id: str,
    db: Session = Depends(get_db),
    current_user: Identity = Depends(deps.get_current_admin),
):
    """
    Delete a project.

    Raises:
        HTTPException 404: If the project doesn't exist
    """
    project = db.get(Project, project_id)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")

    db.delete(project)
    db.commit()
    return {"status": "success", "detail": "Project deleted"}
