import logging
from typing import Optional, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError, ValidationError
from app.models.fitness_class import FitnessClass
from app.models.user import User, RoleEnum
from app.schemas.fitness_class import ClassCreate, ClassUpdate

logger = logging.getLogger(__name__)


class ClassService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_class(self, class_id: int) -> FitnessClass:
        result = await self.db.execute(
            select(FitnessClass)
            .where(FitnessClass.id == class_id)
            .execution_options(populate_existing=True)
        )
        fitness_class = result.scalar_one_or_none()
        if fitness_class is None:
            raise NotFoundError("Class not found")
        return fitness_class

    async def list_classes(
            self,
            category: Optional[str] = None,
            difficulty: Optional[str] = None,
            is_active: Optional[bool] = True,
    ) -> List[FitnessClass]:
        query = select(FitnessClass)
        if category:
            query = query.where(FitnessClass.category == category)
        if difficulty:
            query = query.where(FitnessClass.difficulty == difficulty)
        if is_active is not None:
            query = query.where(FitnessClass.is_active == is_active)
        result = await self.db.execute(query.order_by(FitnessClass.name, FitnessClass.id))
        return result.scalars().all()

    async def _resolve_trainer(self, creator: User, trainer_id: Optional[int]) -> int:
        """Trainers always teach their own classes; an admin may assign any trainer."""
        if creator.role != RoleEnum.admin or trainer_id is None:
            return creator.id

        trainer = await self.db.get(User, trainer_id)
        if trainer is None or trainer.role not in (RoleEnum.trainer, RoleEnum.admin):
            raise ValidationError("trainer_id must reference a trainer")
        return trainer.id

    async def create_class(self, creator: User, data: ClassCreate) -> FitnessClass:
        values = data.model_dump(exclude={"trainer_id"})
        fitness_class = FitnessClass(
            **values,
            trainer_id=await self._resolve_trainer(creator, data.trainer_id),
            current_enrollment=0,
        )
        self.db.add(fitness_class)
        await self.db.commit()
        logger.info("Class %s created by user %s", fitness_class.id, creator.id)
        return await self.get_class(fitness_class.id)

    async def update_class(self, class_id: int, editor: User, data: ClassUpdate) -> FitnessClass:
        fitness_class = await self.get_class(class_id)
        updates = data.model_dump(exclude_unset=True, exclude={"trainer_id"})

        if "trainer_id" in data.model_fields_set and editor.role == RoleEnum.admin and data.trainer_id is not None:
            fitness_class.trainer_id = await self._resolve_trainer(editor, data.trainer_id)

        max_capacity = updates.get("max_capacity")
        if max_capacity is not None and max_capacity < fitness_class.current_enrollment:
            raise ValidationError("max_capacity cannot be lower than the current enrollment")

        for field, value in updates.items():
            if value is None:
                continue
            setattr(fitness_class, field, value)

        await self.db.commit()
        return await self.get_class(class_id)

    async def delete_class(self, class_id: int) -> None:
        fitness_class = await self.get_class(class_id)
        await self.db.delete(fitness_class)
        await self.db.commit()
