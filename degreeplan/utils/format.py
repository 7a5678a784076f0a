from typing import Iterable, Optional


def compact_course_slots(slots: Optional[Iterable[Optional[str]]]) -> list[str]:
    """Drop empty course slots, keeping the submitted order.

    The client form has a fixed number of course inputs; unused ones arrive
    as ``None`` or blank strings.
    """
    if not slots:
        return []
    courses: list[str] = []
    for slot in slots:
        if slot is None:
            continue
        code = str(slot).strip()
        if code:
            courses.append(code)
    return courses
