from timetabler.models.classroom import Classroom, ClassroomStatus, ClassroomType  # noqa: F401
from timetabler.models.course import Course  # noqa: F401
from timetabler.models.department import Department  # noqa: F401
from timetabler.models.faculty import EmploymentType, Faculty, FacultyStatus  # noqa: F401
from timetabler.models.schedule import Schedule, ScheduleStatus, SessionType  # noqa: F401
from timetabler.models.subject import Subject  # noqa: F401
