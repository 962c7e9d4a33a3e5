import logging
from typing import Any, Dict, List, Optional

from pymongo.collection import Collection
from pymongo.database import Database

from database import ASSIGNMENTS, FAQS, FEATURED, SUBMISSIONS, to_dict, to_object_id
from schemas import DeleteResult, InsertResult, UpdateResult

logger = logging.getLogger(__name__)

ALL_LEVELS = "All"
# keeps page * size inside a BSON int64
MAX_PAGING_VALUE = 2 ** 31 - 1


def parse_int(value: Optional[str]) -> int:
    """Lenient integer parsing for query strings: anything unusable becomes 0."""
    try:
        number = int(value)
    except (TypeError, ValueError):
        return 0
    return min(max(number, 0), MAX_PAGING_VALUE)


def _insert_result(result) -> InsertResult:
    return InsertResult(acknowledged=result.acknowledged, inserted_id=str(result.inserted_id))


def _update_result(result) -> UpdateResult:
    upserted = result.upserted_id
    return UpdateResult(
        acknowledged=result.acknowledged,
        matched_count=result.matched_count,
        modified_count=result.modified_count,
        upserted_id=str(upserted) if upserted is not None else None,
    )


class DocumentService:
    collection_name: str

    def __init__(self, db: Database):
        self.collection: Collection = db[self.collection_name]

    def get(self, id_str: str) -> Optional[Dict[str, Any]]:
        return to_dict(self.collection.find_one({"_id": to_object_id(id_str)}))

    def create(self, document: Dict[str, Any]) -> InsertResult:
        result = self.collection.insert_one(document)
        logger.info("Inserted %s into %s", result.inserted_id, self.collection_name)
        return _insert_result(result)

    def _find(self, query: Dict[str, Any]) -> List[Dict[str, Any]]:
        return [to_dict(doc) for doc in self.collection.find(query)]


class AssignmentService(DocumentService):
    collection_name = ASSIGNMENTS

    def list(self, difficulty: Optional[str] = None, page: int = 0, size: int = 0) -> List[Dict[str, Any]]:
        query = {} if difficulty in (None, "", ALL_LEVELS) else {"level": difficulty}
        cursor = self.collection.find(query)
        # size 0 means no limit
        if size > 0:
            cursor = cursor.skip(page * size).limit(size)
        return [to_dict(doc) for doc in cursor]

    def count(self) -> int:
        return self.collection.estimated_document_count()

    def replace_or_create(self, id_str: str, fields: Dict[str, Any]) -> UpdateResult:
        filter_ = {"_id": to_object_id(id_str)}
        result = self.collection.update_one(filter_, {"$set": fields}, upsert=True)
        if result.upserted_id is not None:
            logger.info("Upserted assignment %s", result.upserted_id)
        return _update_result(result)

    def delete(self, id_str: str) -> DeleteResult:
        result = self.collection.delete_one({"_id": to_object_id(id_str)})
        logger.info("Deleted %d assignment(s) with id %s", result.deleted_count, id_str)
        return DeleteResult(acknowledged=result.acknowledged, deleted_count=result.deleted_count)


class SubmissionService(DocumentService):
    collection_name = SUBMISSIONS

    def list_by_status(self, status: Optional[str]) -> List[Dict[str, Any]]:
        return self._find({"status": status})

    def list_by_submitter(self, email: str) -> List[Dict[str, Any]]:
        return self._find({"examineeEmail": email})

    def update_grading(self, id_str: str, status: Optional[str], remark: Optional[str], feedback: Optional[str]) -> UpdateResult:
        filter_ = {"_id": to_object_id(id_str)}
        update = {"$set": {"status": status, "remark": remark, "feedback": feedback}}
        result = self.collection.update_one(filter_, update)
        logger.info("Graded submission %s (matched %d)", id_str, result.matched_count)
        return _update_result(result)


class ReferenceService:
    def __init__(self, db: Database):
        self.db = db

    def list_featured(self) -> List[Dict[str, Any]]:
        return [to_dict(doc) for doc in self.db[FEATURED].find()]

    def list_faqs(self) -> List[Dict[str, Any]]:
        return [to_dict(doc) for doc in self.db[FAQS].find()]
