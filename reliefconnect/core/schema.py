# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Table definitions for every store the service owns.
Repositories query these with raw SQL; this module only creates them.
"""
from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    Text,
)
from sqlalchemy.engine import Engine

metadata = MetaData()

incidents = Table(
    "incidents", metadata,
    Column("id", String(36), primary_key=True),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True)),
    Column("title", Text, nullable=False),
    Column("description", Text),
    Column("location", JSON, nullable=False),
    Column("status", String(32), nullable=False, server_default="active"),
    Column("severity", String(32), nullable=False),
    Column("type", String(255), nullable=False),
    Column("resolved_at", DateTime(timezone=True)),
)

resources = Table(
    "resources", metadata,
    Column("id", String(36), primary_key=True),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True)),
    Column("type", String(255), nullable=False),
    Column("name", Text, nullable=False),
    Column("quantity", Integer, nullable=False, server_default="0"),
    Column("location", JSON, nullable=False),
    Column("status", String(32), nullable=False, server_default="available"),
)

skills = Table(
    "skills", metadata,
    Column("id", String(36), primary_key=True),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("name", Text, nullable=False),
    Column("category", String(255), nullable=False),
    Column("description", Text),
    Column("icon", String(64)),
)

volunteers = Table(
    "volunteers", metadata,
    Column("id", String(36), primary_key=True),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True)),
    Column("name", Text, nullable=False),
    Column("contact_info", JSON, nullable=False),
    Column("skills", JSON, nullable=False),
    Column("location", JSON, nullable=False),
    Column("status", String(32), nullable=False, server_default="inactive"),
    Column("current_task", String(36)),
    Column("availability", JSON),
    Column("emergency_contact", JSON),
    Column("experience_level", String(32), nullable=False, server_default="beginner"),
    Column("joined_date", DateTime(timezone=True), nullable=False),
    Column("contribution_points", Integer, nullable=False, server_default="0"),
    Column("badges", JSON),
)

teams = Table(
    "teams", metadata,
    Column("id", String(36), primary_key=True),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True)),
    Column("name", Text, nullable=False),
    Column("description", Text),
    Column("leader_id", String(36)),
    Column("members", JSON, nullable=False),
    Column("skills_required", JSON, nullable=False),
    Column("active", Boolean, nullable=False, server_default="1"),
    Column("incident_id", String(36), ForeignKey("incidents.id")),
    Column("location", Text),
)

tasks = Table(
    "tasks", metadata,
    Column("id", String(36), primary_key=True),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("title", Text, nullable=False),
    Column("description", Text),
    Column("status", String(32), nullable=False, server_default="open"),
    Column("priority", String(32), nullable=False, server_default="medium"),
    Column("skills_required", JSON, nullable=False),
    Column("incident_id", String(36), ForeignKey("incidents.id")),
    Column("location", JSON),
    Column("estimated_duration", Integer),
)

shifts = Table(
    "shifts", metadata,
    Column("id", String(36), primary_key=True),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("volunteer_id", String(36), nullable=False),
    Column("task_id", String(36), ForeignKey("tasks.id")),
    Column("start_time", DateTime(timezone=True), nullable=False),
    Column("end_time", DateTime(timezone=True), nullable=False),
    Column("status", String(32), nullable=False, server_default="scheduled"),
    Column("check_in_time", DateTime(timezone=True)),
    Column("check_out_time", DateTime(timezone=True)),
    Column("notes", Text),
)


def create_all(engine: Engine) -> None:
    metadata.create_all(engine)


def drop_all(engine: Engine) -> None:
    metadata.drop_all(engine)
