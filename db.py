import sqlite3
from flask import current_app, g

SQLITE_PREFIX = "sqlite:///"


class DatabaseNotConfigured(RuntimeError):
    pass


def database_path(url):
    if not url:
        raise DatabaseNotConfigured("DATABASE_URL is not set")
    if not url.startswith(SQLITE_PREFIX):
        raise DatabaseNotConfigured(f"Unsupported DATABASE_URL: {url.split(':', 1)[0]}")
    return url[len(SQLITE_PREFIX):]


def get_db():
    if "db" not in g:
        g.db = sqlite3.connect(database_path(current_app.config["DATABASE_URL"]))
        g.db.row_factory = sqlite3.Row
        g.db.execute("PRAGMA foreign_keys = ON")
    return g.db


def close_db(e=None):
    db = g.pop("db", None)
    if db is not None:
        db.close()


def row_to_dict(row):
    return dict(row) if row is not None else None


def init_db():
    db = get_db()
    c = db.cursor()

    # COURSES
    c.execute("""
    CREATE TABLE IF NOT EXISTS courses (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        title TEXT NOT NULL,
        description TEXT,
        content TEXT,
        image TEXT
    )
    """)

    # USERS (sha-256 hex of the password, unsalted)
    c.execute("""
    CREATE TABLE IF NOT EXISTS users (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT,
        email TEXT NOT NULL UNIQUE COLLATE NOCASE,
        password_hash TEXT NOT NULL,
        created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
    )
    """)

    # LEVELS
    c.execute("""
    CREATE TABLE IF NOT EXISTS levels (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        title TEXT NOT NULL,
        description TEXT,
        course_id INTEGER,
        FOREIGN KEY(course_id) REFERENCES courses(id)
    )
    """)

    # SUBMISSIONS
    c.execute("""
    CREATE TABLE IF NOT EXISTS submissions (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id INTEGER NOT NULL,
        level_id INTEGER NOT NULL,
        content TEXT NOT NULL,
        created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
        FOREIGN KEY(user_id) REFERENCES users(id),
        FOREIGN KEY(level_id) REFERENCES levels(id)
    )
    """)

    # KNOWLEDGE BASE
    c.execute("""
    CREATE TABLE IF NOT EXISTS knowledge_base (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        title TEXT NOT NULL,
        content TEXT
    )
    """)

    # Seed if empty
    c.execute("SELECT COUNT(*) AS cnt FROM courses")
    if c.fetchone()["cnt"] == 0:
        c.executemany("""
            INSERT INTO courses (title, description, content, image)
            VALUES (?, ?, ?, ?)
        """, [
            (
                "Introduction to Programming",
                "Learn basic programming concepts",
                "Welcome to the Introduction to Programming course!",
                None
            ),
            (
                "Web Development Basics",
                "Get started with HTML, CSS and JavaScript",
                "This course introduces the fundamentals of web development.",
                None
            )
        ])

        c.executemany("""
            INSERT INTO levels (title, description, course_id)
            VALUES (?, ?, ?)
        """, [
            ("Variables and Data Types", "Understand variables and data types", 1),
            ("Control Structures", "Learn about if statements and loops", 1),
            ("HTML & CSS Fundamentals", "Basics of building web pages", 2),
            ("JavaScript Basics", "Introduction to JavaScript programming", 2)
        ])

        c.executemany("""
            INSERT INTO knowledge_base (title, content)
            VALUES (?, ?)
        """, [
            (
                "What is a Variable?",
                "A variable is a storage location for data that can change during program execution."
            ),
            (
                "HTML Tags Overview",
                "HTML tags are used to structure the content of web pages."
            )
        ])

    db.commit()
