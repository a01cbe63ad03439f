"""
Projects toy endpoint.

Static lists, no persistence. Each verb answers with its own fixed list.
"""

from typing import List

from fastapi import APIRouter

router = APIRouter(prefix="/projects", tags=["Projects"])


@router.get("", response_model=List[str])
async def list_projects() -> List[str]:
    return ["Projeto 1", "Projeto 2", "Projeto 3"]


@router.post("", response_model=List[str])
async def create_project() -> List[str]:
    return ["Projeto 1", "Projeto 2", "Projeto 3", "Projeto 4"]


@router.put("", response_model=List[str])
async def update_project() -> List[str]:
    return ["Projeto 1", "Projeto 2", "Projeto 3", "Projeto 5"]


@router.delete("", response_model=List[str])
async def delete_project() -> List[str]:
    return ["Projeto 1", "Projeto 2"]
