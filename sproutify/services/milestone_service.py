from typing import List

from fastapi import HTTPException, status

from sproutify.core.logger import db_logger
from sproutify.models.classroom import Classroom
from sproutify.models.document import TowerDocument
from sproutify.models.profile import Profile
from sproutify.schemas.milestone import MilestoneCreate, MilestoneOut, MilestoneUpdate

MILESTONE_DOCUMENT_TYPE = "milestone"

# placeholders for milestones saved without an attached file
DEFAULT_FILE = {
    "file_name": "milestone.txt",
    "file_path": "milestone-documents/default.txt",
    "file_url": "",
    "file_size": 0,
    "file_type": "text/plain",
}


def serialize_milestone(doc: TowerDocument) -> MilestoneOut:
    classroom = doc.classroom if isinstance(doc.classroom, Classroom) else None
    return MilestoneOut(
        id=doc.id,
        classroom_id=doc.classroom_id,
        classroom_name=classroom.name if classroom else None,
        teacher_id=doc.teacher_id,
        title=doc.title,
        description=doc.description,
        milestone_type=doc.milestone_type,
        output_type=doc.output_type,
        content=doc.content,
        file_name=doc.file_name,
        file_url=doc.file_url,
        created_at=doc.created_at,
        updated_at=doc.updated_at,
    )


class MilestoneService:

    async def get_classroom_for_teacher(self, classroom_id: int, teacher: Profile) -> Classroom:
        classroom = await Classroom.get_or_none(id=classroom_id)
        if not classroom:
            raise HTTPException(status_code=404, detail="Classroom not found")
        if not teacher.can_manage_classroom(classroom):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not your classroom")
        return classroom

    async def get_milestone_for_teacher(self, milestone_id: int, teacher: Profile) -> TowerDocument:
        doc = await TowerDocument.get_or_none(
            id=milestone_id,
            document_type=MILESTONE_DOCUMENT_TYPE
        ).prefetch_related("classroom")
        if not doc:
            raise HTTPException(status_code=404, detail="Milestone not found")

        owns_classroom = doc.classroom is not None and teacher.can_manage_classroom(doc.classroom)
        if not owns_classroom and doc.teacher_id != teacher.id:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not your milestone")
        return doc

    async def create_milestone(self, teacher: Profile, data: MilestoneCreate) -> MilestoneOut:
        classroom = await self.get_classroom_for_teacher(data.classroom_id, teacher)

        doc = await TowerDocument.create(
            classroom=classroom,
            teacher=teacher,
            title=data.title,
            description=data.description or None,
            document_type=MILESTONE_DOCUMENT_TYPE,
            output_type="report",
            milestone_type=data.milestone_type.value,
            content=data.content or None,
            **DEFAULT_FILE
        )

        db_logger.log_create("Milestone", {
            "id": doc.id,
            "classroom_id": classroom.id,
            "milestone_type": doc.milestone_type
        })
        doc.classroom = classroom
        return serialize_milestone(doc)

    async def list_classroom_milestones(self, classroom_id: int, teacher: Profile) -> List[MilestoneOut]:
        classroom = await self.get_classroom_for_teacher(classroom_id, teacher)
        docs = await TowerDocument.filter(
            classroom_id=classroom.id,
            document_type=MILESTONE_DOCUMENT_TYPE
        ).order_by("-created_at", "-id").prefetch_related("classroom")
        return [serialize_milestone(doc) for doc in docs]

    async def list_recent_milestones(self, teacher: Profile, limit: int = 10) -> List[MilestoneOut]:
        docs = await TowerDocument.filter(
            teacher_id=teacher.id,
            document_type=MILESTONE_DOCUMENT_TYPE
        ).order_by("-created_at", "-id").limit(limit).prefetch_related("classroom")
        return [serialize_milestone(doc) for doc in docs]

    async def update_milestone(self, milestone_id: int, teacher: Profile, data: MilestoneUpdate) -> MilestoneOut:
        doc = await self.get_milestone_for_teacher(milestone_id, teacher)

        updates = data.model_dump(exclude_unset=True, mode="json")
        for key in ("title", "milestone_type"):
            if key in updates and not updates[key]:
                raise HTTPException(status_code=400, detail=f"Milestone {key} cannot be empty")

        doc.update_from_dict(updates)
        await doc.save()

        db_logger.log_update("Milestone", doc.id, updates)
        return serialize_milestone(doc)

    async def delete_milestone(self, milestone_id: int, teacher: Profile):
        doc = await self.get_milestone_for_teacher(milestone_id, teacher)
        await doc.delete()
        db_logger.log_delete("Milestone", milestone_id)
