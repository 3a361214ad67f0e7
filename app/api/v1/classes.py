from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from app.core.dependencies import get_class_service
from app.core.rbac import require_admin, require_staff
from app.models.fitness_class import ClassCategoryEnum, DifficultyEnum
from app.models.user import User
from app.schemas.fitness_class import ClassCreate, ClassUpdate, ClassResponse
from app.services.class_service import ClassService

router = APIRouter(tags=["classes"])


@router.get("")
async def list_classes(
    category: Optional[ClassCategoryEnum] = Query(None),
    difficulty: Optional[DifficultyEnum] = Query(None),
    service: ClassService = Depends(get_class_service),
):
    classes = await service.list_classes(category=category, difficulty=difficulty)
    return {
        "success": True,
        "data": {"classes": [ClassResponse.model_validate(c) for c in classes], "count": len(classes)},
    }


@router.get("/{class_id}")
async def get_class(class_id: int, service: ClassService = Depends(get_class_service)):
    fitness_class = await service.get_class(class_id)
    return {"success": True, "data": {"class": ClassResponse.model_validate(fitness_class)}}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_class(
    data: ClassCreate,
    current_user: User = Depends(require_staff),
    service: ClassService = Depends(get_class_service),
):
    fitness_class = await service.create_class(current_user, data)
    return {
        "success": True,
        "message": "Class created successfully",
        "data": {"class": ClassResponse.model_validate(fitness_class)},
    }


@router.put("/{class_id}")
async def update_class(
    class_id: int,
    data: ClassUpdate,
    current_user: User = Depends(require_staff),
    service: ClassService = Depends(get_class_service),
):
    fitness_class = await service.update_class(class_id, current_user, data)
    return {
        "success": True,
        "message": "Class updated successfully",
        "data": {"class": ClassResponse.model_validate(fitness_class)},
    }


@router.delete("/{class_id}")
async def delete_class(
    class_id: int,
    current_user: User = Depends(require_admin),
    service: ClassService = Depends(get_class_service),
):
    await service.delete_class(class_id)
    return {"success": True, "message": "Class deleted successfully"}
