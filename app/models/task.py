from app.extensions import db
from app.models.base import PKType, TimestampMixin

TASK_PRIORITIES = ("low", "medium", "high", "urgent")
TASK_STATUSES = ("pending", "in_progress", "completed")


class Task(TimestampMixin, db.Model):
    __tablename__ = "tasks"

    id = db.Column(PKType, primary_key=True, autoincrement=True)
    property_id = db.Column(PKType, db.ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True)
    unit_id = db.Column(PKType, db.ForeignKey("units.id", ondelete="SET NULL"), nullable=True, index=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    priority = db.Column(db.String(16), nullable=False, default="medium", index=True)
    status = db.Column(db.String(24), nullable=False, default="pending", index=True)
    due_date = db.Column(db.Date, nullable=True, index=True)
    completed_at = db.Column(db.DateTime(timezone=True), nullable=True)

    property = db.relationship("Property")
    unit = db.relationship("Unit")
