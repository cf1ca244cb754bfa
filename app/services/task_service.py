from app.errors import AppError, NotFoundError, ValidationError
from app.extensions import db
from app.models import Property, Task, Unit
from app.models.base import utcnow
from app.models.task import TASK_PRIORITIES, TASK_STATUSES
from app.services.parsing import clean_text, parse_date, parse_int, require_fields
from app.services.property_service import PropertyService

TASK_TRANSITIONS = {
    "pending": {"in_progress", "completed"},
    "in_progress": {"pending", "completed"},
    "completed": {"in_progress"},
}


class TaskService:
    @staticmethod
    def create_task(owner_id, payload):
        require_fields(payload, ["property_id", "title"])
        prop = PropertyService.get_owned_property(payload["property_id"], owner_id)

        priority = (payload.get("priority") or "medium").strip().lower()
        if priority not in TASK_PRIORITIES:
            raise ValidationError("Invalid priority.", fields=["priority"])

        unit_id = payload.get("unit_id")
        if unit_id not in (None, ""):
            unit = db.session.get(Unit, parse_int(unit_id, "unit_id"))
            if not unit or unit.is_deleted or unit.property_id != prop.id:
                raise ValidationError("Unit does not belong to this property.", fields=["unit_id"])
            unit_id = unit.id
        else:
            unit_id = None

        task = Task(
            property_id=prop.id,
            unit_id=unit_id,
            title=str(payload["title"]).strip(),
            description=clean_text(payload.get("description")),
            priority=priority,
            status="pending",
            due_date=parse_date(payload.get("due_date"), "due_date", required=False),
        )
        db.session.add(task)
        db.session.commit()
        return task

    @staticmethod
    def list_tasks(owner_id, property_id=None, status=None):
        query = Task.query.join(Property, Property.id == Task.property_id).filter(Property.user_id == owner_id)
        if property_id:
            query = query.filter(Task.property_id == int(property_id))
        if status:
            query = query.filter(Task.status == status)
        return query.order_by(Task.due_date.is_(None), Task.due_date.asc(), Task.id.asc()).all()

    @staticmethod
    def get_owned_task(task_id, owner_id):
        task = db.session.get(Task, task_id)
        if not task:
            raise NotFoundError("Task not found.")
        PropertyService.get_owned_property(task.property_id, owner_id)
        return task

    @staticmethod
    def update_status(task_id, owner_id, new_status):
        task = TaskService.get_owned_task(task_id, owner_id)
        new_status = (new_status or "").strip().lower()
        if new_status not in TASK_STATUSES:
            raise ValidationError("Invalid task status.", fields=["status"])
        if new_status not in TASK_TRANSITIONS.get(task.status, set()):
            raise AppError(f"Invalid status transition from {task.status} to {new_status}.", 400)

        task.status = new_status
        task.completed_at = utcnow() if new_status == "completed" else None
        db.session.commit()
        return task

    @staticmethod
    def to_dict(task):
        return {
            "id": task.id,
            "property_id": task.property_id,
            "property_name": task.property.name if task.property else None,
            "unit_id": task.unit_id,
            "title": task.title,
            "description": task.description,
            "priority": task.priority,
            "status": task.status,
            "due_date": task.due_date.isoformat() if task.due_date else None,
        }
