# database.py
from pymongo import MongoClient, ASCENDING, DESCENDING
from pymongo.database import Database
import config

client = MongoClient(config.MONGODB_URI)
db = client[config.MONGODB_DB]

# Collections
users = db.users
packages = db.packages
bookings = db.bookings
payments = db.payments
payment_intents = db.payment_intents


def get_db() -> Database:
    return db


def ensure_indexes(database: Database):
    """Create the indexes the workflow relies on.

    The unique sparse indexes on payment references are the store-side guard
    against two bookings (or two payment rows) for one gateway capture.
    Unpaid bookings simply omit the field.
    """
    database.bookings.create_index("payment_reference", unique=True, sparse=True)
    database.bookings.create_index([("agency_id", ASCENDING), ("status", ASCENDING)])
    database.bookings.create_index([("user_id", ASCENDING), ("created_at", DESCENDING)])
    database.payments.create_index("reference", unique=True, sparse=True)
    database.payments.create_index("booking_id")
    database.payment_intents.create_index("reference", unique=True)
    database.packages.create_index([("agency_id", ASCENDING), ("status", ASCENDING)])
    database.users.create_index("email", unique=True)
    database.users.create_index([("role", ASCENDING), ("verified", ASCENDING)])
