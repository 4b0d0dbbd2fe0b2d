from pymongo import ASCENDING, MongoClient


class MongoDB:
    def __init__(self):
        self.client = None
        self.db = None

    def connect(self, mongo_uri: str, db_name: str):
        self.client = MongoClient(mongo_uri)
        self.db = self.client[db_name]

    def disconnect(self):
        if self.client:
            self.client.close()

    def get_collection(self, collection_name: str):
        if self.db is None:
            raise Exception("Database connection is not initialized")
        return self.db[collection_name]

    def ensure_indexes(self):
        messages = self.get_collection("messages")
        messages.create_index([("sender_id", ASCENDING), ("receiver_id", ASCENDING), ("created_at", ASCENDING)])
        messages.create_index([("receiver_id", ASCENDING), ("is_read", ASCENDING)])


# Global MongoDB instance
mongodb = None


def init_mongoDB(settings):
    global mongodb
    mongodb = MongoDB()
    mongodb.connect(settings.MONGO_URI, settings.MONGO_DB_NAME)


def close_mongoDB():
    if mongodb is not None:
        mongodb.disconnect()


def get_db():
    if mongodb is None:
        raise Exception("MongoDB is not initialized")
    return mongodb
