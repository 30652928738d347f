from canvas_bot.canvas import CanvasClient
from canvas_bot.config import get_settings

s = get_settings()
client = CanvasClient(settings=s)

courses = client.fetch_courses()
print(f"Total: {len(courses)} favorited courses on {s.canvas_base_url}\n")
for i, course in enumerate(courses):
    scores = ", ".join(
        f"{e.current_score:.2f}" for e in course.enrollments
    ) or "no score"
    print(f"  {i+1}. [{course.id}] {course.display_name} ({scores})")
