# Import every model so Base.metadata knows all tables before create_all
from app.db.base_class import Base  # noqa: F401
from app.models.user import User  # noqa: F401
from app.models.roadmap import Roadmap, Module, Task  # noqa: F401
from app.models.progress import UserRoadmap, UserProgress  # noqa: F401
from app.models.award import Badge, Certificate  # noqa: F401
from app.models.course import Course, CourseModule, Lesson  # noqa: F401
