import logging
import sys
import uuid
from pathlib import Path
import pytest
from faker import Faker
from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import config
import server
from models import PostCreate
from store import PostStore, get_client

logger = logging.getLogger(__name__)

fake = Faker()

TITLES = ["blog post 1", "blog post 2", "blog post 3", "blog post 4", "blog post 5"]
CONTENTS = [
    "this is a blog post",
    "look at this blog post",
    "wow it is a blog post",
    "check out the blog post",
]


class TestEmbeddingFunction:
    __test__ = False
    default_space = "cosine"

    def __call__(self, input):
        embeddings = []
        for text in input:
            base = float(len(text or ""))
            embeddings.append([base + float(i) for i in range(8)])
        return embeddings

    def embed_documents(self, input):
        return self.__call__(input)

    def embed_query(self, input):
        return self.__call__(input)

    def name(self):
        return "test"

    def is_legacy(self):
        return False

    def get_config(self):
        return {}


def generate_post_data() -> dict:
    return {
        "title": fake.random_element(TITLES),
        "content": fake.random_element(CONTENTS),
        "author": {
            "firstName": fake.first_name(),
            "lastName": fake.last_name(),
        },
    }


def seed_posts(store: PostStore, n: int = 5):
    logger.info("seeding blog post data")
    return store.insert_many([PostCreate(**generate_post_data()) for _ in range(n)])


@pytest.fixture
def post_data():
    return generate_post_data()


@pytest.fixture
def test_collection():
    client = get_client(config.TEST_DATABASE_PATH)
    collection = client.get_or_create_collection(
        name=f"test_posts_{uuid.uuid4()}",
        embedding_function=TestEmbeddingFunction(),
    )
    yield collection
    client.delete_collection(collection.name)


@pytest.fixture
def store(test_collection):
    return PostStore(test_collection)


@pytest.fixture
def seeded_store(store):
    seed_posts(store)
    yield store
    logger.warning("Deleting database")
    store.clear()


@pytest.fixture
def client(seeded_store):
    app = server.create_app(store=seeded_store)
    with TestClient(app) as test_client:
        yield test_client
