import logging
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterable, Optional

import chromadb
from chromadb.config import Settings
from chromadb.utils import embedding_functions

import config
from models import Author, BlogPost, PostCreate, PostUpdate

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Raised when the underlying document store fails."""


@contextmanager
def _store_call(operation: str):
    try:
        yield
    except StoreError:
        raise
    except Exception as exc:
        raise StoreError(f"{operation} failed: {exc}") from exc


def _to_metadata(title: str, author: Author, created: datetime) -> dict:
    # chroma metadata is flat, so the author is split into two keys
    return {
        "title": title,
        "author_first_name": author.first_name,
        "author_last_name": author.last_name,
        "created": created.isoformat(),
    }


def _deserialize_post(post_id: str, document: str, metadata: Optional[dict]) -> BlogPost:
    metadata = metadata or {}
    return BlogPost(
        id=post_id,
        title=metadata.get("title", ""),
        content=document or "",
        author=Author(
            first_name=metadata.get("author_first_name", ""),
            last_name=metadata.get("author_last_name", ""),
        ),
        created=datetime.fromisoformat(metadata["created"]),
    )


def _deserialize_all(data: Optional[dict]) -> list[BlogPost]:
    if not data or not data.get("ids"):
        return []
    posts = []
    for i in range(len(data["ids"])):
        posts.append(_deserialize_post(
            data["ids"][i],
            data["documents"][i],
            data["metadatas"][i],
        ))
    return posts


class PostStore:
    """Blog posts kept in a chroma collection, one record per post.

    The post content is the record's document; everything else lives in
    its metadata.
    """

    def __init__(self, collection, client=None):
        self._collection = collection
        self._client = client

    @property
    def collection(self):
        if self._collection is None:
            raise StoreError("store is closed")
        return self._collection

    def insert(self, post: PostCreate) -> BlogPost:
        return self.insert_many([post])[0]

    def insert_many(self, posts: Iterable[PostCreate]) -> list[BlogPost]:
        created = [
            BlogPost(
                id=str(uuid.uuid4()),
                title=post.title,
                content=post.content,
                author=post.author,
                created=datetime.now(timezone.utc),
            )
            for post in posts
        ]
        if not created:
            return []
        with _store_call("insert"):
            self.collection.add(
                ids=[post.id for post in created],
                documents=[post.content for post in created],
                metadatas=[_to_metadata(post.title, post.author, post.created) for post in created],
            )
        return created

    def find_all(self) -> list[BlogPost]:
        with _store_call("find"):
            data = self.collection.get()
        return _deserialize_all(data)

    def find_by_id(self, post_id: str) -> Optional[BlogPost]:
        with _store_call("find"):
            data = self.collection.get(ids=[post_id])
        posts = _deserialize_all(data)
        return posts[0] if posts else None

    def find_one(self) -> Optional[BlogPost]:
        with _store_call("find"):
            data = self.collection.get(limit=1)
        posts = _deserialize_all(data)
        return posts[0] if posts else None

    def update_by_id(self, post_id: str, update: PostUpdate) -> Optional[BlogPost]:
        existing = self.find_by_id(post_id)
        if existing is None:
            return None
        updated = existing.model_copy(update={
            "title": update.title if update.title is not None else existing.title,
            "content": update.content if update.content is not None else existing.content,
            "author": update.author if update.author is not None else existing.author,
        })
        with _store_call("update"):
            self.collection.update(
                ids=[post_id],
                documents=[updated.content],
                metadatas=[_to_metadata(updated.title, updated.author, existing.created)],
            )
        return updated

    def delete_by_id(self, post_id: str) -> None:
        with _store_call("delete"):
            self.collection.delete(ids=[post_id])

    def count(self) -> int:
        with _store_call("count"):
            return self.collection.count()

    def clear(self) -> int:
        with _store_call("clear"):
            ids = self.collection.get(include=[])["ids"]
            if ids:
                self.collection.delete(ids=ids)
        return len(ids)

    def close(self) -> None:
        self._collection = None
        self._client = None


def get_client(path: str):
    if path:
        return chromadb.PersistentClient(
            path=path,
            settings=Settings(anonymized_telemetry=False),
        )
    return chromadb.Client(settings=Settings(anonymized_telemetry=False))


def open_store(path: str, collection_name: str, embedding_function=None) -> PostStore:
    if embedding_function is None:
        embedding_function = embedding_functions.SentenceTransformerEmbeddingFunction(
            model_name=config.EMBEDDING_MODEL
        )
    with _store_call("open"):
        client = get_client(path)
        collection = client.get_or_create_collection(
            name=collection_name,
            embedding_function=embedding_function,
        )
    logger.info("Opened collection %s at %s", collection_name, path or "<memory>")
    return PostStore(collection, client=client)
