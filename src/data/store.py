"""
Acesso ao armazenamento de documentos (MongoDB) e de arquivos (GridFS).

As coleções espelham o modelo do app: ``vacancies``, ``candidates``
(cada candidato aponta para a vaga via ``vacancy_id``) e ``interviews``.
Os ids são strings geradas aqui, para que os documentos possam ser
referenciados em URLs sem conversão.
"""
from dataclasses import dataclass
from typing import Optional, Dict, Any, List, Tuple
import logging
import uuid

import gridfs
from gridfs.errors import NoFile
from bson import ObjectId
from bson.errors import InvalidId
from pymongo import MongoClient, ASCENDING, DESCENDING

logger = logging.getLogger(__name__)

VACANCIES = "vacancies"
CANDIDATES = "candidates"
INTERVIEWS = "interviews"


def new_id() -> str:
    return uuid.uuid4().hex


class MongoStore:
    def __init__(self, db):
        self.db = db

    @classmethod
    def from_url(cls, url: str, name: str) -> "MongoStore":
        client = MongoClient(url, serverSelectionTimeoutMS=5000, tz_aware=True)
        return cls(client[name])

    def ping(self) -> bool:
        try:
            self.db.client.admin.command("ping")
            return True
        except Exception:
            logger.warning("mongo ping failed", exc_info=True)
            return False

    def insert(self, collection: str, doc: Dict[str, Any]) -> str:
        doc = dict(doc)
        doc.setdefault("_id", new_id())
        self.db[collection].insert_one(doc)
        return doc["_id"]

    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        return self.db[collection].find_one({"_id": doc_id})

    def find(
        self,
        collection: str,
        filter: Optional[Dict[str, Any]] = None,
        sort: Optional[List[Tuple[str, int]]] = None,
    ) -> List[Dict[str, Any]]:
        cursor = self.db[collection].find(filter or {})
        if sort:
            cursor = cursor.sort([(k, DESCENDING if d < 0 else ASCENDING) for k, d in sort])
        return list(cursor)

    def update(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> bool:
        res = self.db[collection].update_one({"_id": doc_id}, {"$set": fields})
        return res.matched_count > 0

    def upsert(self, collection: str, doc_id: str, doc: Dict[str, Any]) -> None:
        body = {k: v for k, v in doc.items() if k != "_id"}
        self.db[collection].replace_one({"_id": doc_id}, body, upsert=True)

    def increment(self, collection: str, doc_id: str, field: str, by: int = 1) -> bool:
        query: Dict[str, Any] = {"_id": doc_id}
        if by < 0:
            # nunca deixa o contador negativo
            query[field] = {"$gte": -by}
        res = self.db[collection].update_one(query, {"$inc": {field: by}})
        return res.modified_count > 0

    def delete(self, collection: str, doc_id: str) -> bool:
        res = self.db[collection].delete_one({"_id": doc_id})
        return res.deleted_count > 0


@dataclass
class StoredFile:
    data: bytes
    filename: str
    content_type: str


class GridFSBlobStore:
    def __init__(self, db):
        self.fs = gridfs.GridFS(db)

    def put(self, path: str, data: bytes, content_type: str) -> str:
        file_id = self.fs.put(data, filename=path, metadata={"contentType": content_type})
        return str(file_id)

    def get(self, file_id: str) -> Optional[StoredFile]:
        try:
            out = self.fs.get(ObjectId(file_id))
        except (InvalidId, NoFile):
            return None
        meta = out.metadata or {}
        return StoredFile(
            data=out.read(),
            filename=out.filename or "",
            content_type=meta.get("contentType") or "application/octet-stream",
        )
