"""
MongoDB Connection Utility

Collections:
- users, jobs, applications
- community_posts, community_replies
- resources, sessions

References between collections are ObjectIds checked by the services.
The store itself only enforces two things: unique user email and one
application per (job, applicant) pair.
"""

from fastapi import Request
from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.database import Database
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from careerflow.core.config import get_settings
from careerflow.core.logging_config import get_logger

logger = get_logger(__name__)


# Collection name constants (avoid typos)
COLLECTIONS = {
    "users": "users",
    "jobs": "jobs",
    "applications": "applications",
    "posts": "community_posts",
    "replies": "community_replies",
    "resources": "resources",
    "sessions": "sessions",
}


def create_mongo_client(uri: str = None) -> MongoClient:
    """Create a MongoDB client. Connection pooling is handled internally by pymongo."""
    settings = get_settings()
    return MongoClient(uri or settings.mongodb_uri)


def get_db(request: Request) -> Database:
    """
    Dependency for FastAPI route injection.
    The database handle is opened at startup and kept on app.state.

    Usage:
        @app.get("/jobs")
        def list_jobs(db: Database = Depends(get_db)):
            ...
    """
    return request.app.state.db


def get_collection(db: Database, name: str) -> Collection:
    """Get a collection by its key in COLLECTIONS."""
    return db[COLLECTIONS[name]]


def test_mongo_connection(db: Database) -> bool:
    """
    Test if MongoDB is reachable.
    Returns True if connection successful, False otherwise.
    """
    try:
        # ping command checks connection
        db.command("ping")
        return True
    except PyMongoError as e:
        logger.warning("MongoDB connection failed: %s", e)
        return False


def init_mongo_indexes(db: Database) -> None:
    """
    Create indexes for uniqueness and query performance.
    Call this once during app startup.
    """
    users = get_collection(db, "users")
    users.create_index("email", unique=True)
    users.create_index("role")

    jobs = get_collection(db, "jobs")
    jobs.create_index("posted_by")
    jobs.create_index("application_deadline")

    # At most one application per (job, applicant)
    get_collection(db, "applications").create_index(
        [("job_id", ASCENDING), ("applicant_id", ASCENDING)],
        unique=True
    )

    get_collection(db, "posts").create_index([("category", ASCENDING), ("created_at", DESCENDING)])
    get_collection(db, "replies").create_index([("post_id", ASCENDING), ("created_at", ASCENDING)])

    get_collection(db, "resources").create_index([
        ("type", ASCENDING),
        ("category", ASCENDING),
        ("created_at", DESCENDING)
    ])

    sessions = get_collection(db, "sessions")
    sessions.create_index("counselor_id")
    sessions.create_index("job_seeker_id")

    logger.info("MongoDB indexes created successfully")
