import json
import os

DEFAULT_COURSES = [
    {
        "id": 1,
        "title": "Introduction to the Platform",
        "description": "Learn about the basics of this learning platform.",
        "content": "Welcome to the introduction course."
    },
    {
        "id": 2,
        "title": "Advanced Concepts",
        "description": "Dive deeper into advanced topics.",
        "content": "This course covers advanced concepts."
    },
    {
        "id": 3,
        "title": "Practical Exercises",
        "description": "Hands-on exercises to practice what you have learned.",
        "content": "Here you will find practical exercises."
    }
]


class JsonFileStore:
    def __init__(self, path, seed=()):
        self.path = path
        self.seed = list(seed)

    def ensure(self):
        os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
        if not os.path.exists(self.path):
            self.save(self.seed)

    def load(self):
        try:
            with open(self.path, encoding="utf-8") as f:
                items = json.load(f)
        except (OSError, ValueError):
            return []
        if not isinstance(items, list):
            return []
        return items

    def save(self, items):
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(items, f, indent=2)


def next_id(items):
    return max((item["id"] for item in items), default=0) + 1


def users_store(data_dir):
    return JsonFileStore(os.path.join(data_dir, "users.json"))


def courses_store(data_dir):
    return JsonFileStore(os.path.join(data_dir, "courses.json"), DEFAULT_COURSES)
