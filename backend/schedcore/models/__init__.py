from schedcore.models.room import Room, RoomType  # noqa: F401
from schedcore.models.scheduled_subject import ScheduledSubject  # noqa: F401
from schedcore.models.section import Section  # noqa: F401
from schedcore.models.setting import CURRENT_SEMESTER_KEY, Setting  # noqa: F401
from schedcore.models.subject import CourseSubject, Semester, Subject  # noqa: F401
