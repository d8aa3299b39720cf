from motor.motor_asyncio import AsyncIOMotorClient

from config.env import MONGO_URI

_client = None


def get_db():
    """
    Lazily connect so importing routes/workers never needs a live Mongo.
    """
    global _client

    if _client is None:
        if not MONGO_URI:
            raise RuntimeError("MONGODB_URI not set")
        _client = AsyncIOMotorClient(MONGO_URI)

    return _client.get_default_database()
