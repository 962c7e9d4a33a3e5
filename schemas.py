"""
Database Schemas for the Group Study API

Assignments and submissions are open documents: the typed fields below are the
ones the front end relies on, and any other field a client sends is stored
verbatim, explicit nulls included. Identifiers are always assigned by the
store, so a body carrying ``_id`` is rejected. Results of write operations
mirror the MongoDB driver's result objects in camelCase.
"""

from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, NonNegativeFloat, NonNegativeInt, model_validator


class OpenDocument(BaseModel):
    model_config = ConfigDict(extra="allow")

    @model_validator(mode="before")
    @classmethod
    def reject_client_id(cls, data: Any) -> Any:
        if isinstance(data, dict) and "_id" in data:
            raise ValueError("_id is assigned by the server and cannot be set")
        return data

    def to_document(self) -> dict:
        return self.model_dump(exclude_unset=True)


class Assignment(OpenDocument):
    title: Optional[str] = None
    description: Optional[str] = None
    level: Optional[str] = Field(None, description="easy|medium|hard")
    marks: Optional[Union[NonNegativeInt, NonNegativeFloat]] = None
    dueDate: Optional[str] = None
    thumbnail: Optional[str] = None
    creatorEmail: Optional[str] = None


class AssignmentUpdate(Assignment):
    pass


class Submission(OpenDocument):
    examineeEmail: Optional[str] = None
    assignmentId: Optional[str] = None
    status: str = Field("pending", description="pending|completed")
    remark: Optional[str] = None
    feedback: Optional[str] = None
    pdfLink: Optional[str] = None
    note: Optional[str] = None

    def to_document(self) -> dict:
        doc = super().to_document()
        doc.setdefault("status", self.status)
        return doc


class GradingUpdate(BaseModel):
    status: Optional[str] = None
    remark: Optional[str] = None
    feedback: Optional[str] = None


class IdentityClaims(BaseModel):
    model_config = ConfigDict(extra="allow")

    email: str = Field(..., min_length=1)


# Write results

class WriteResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    acknowledged: bool = True


class InsertResult(WriteResult):
    inserted_id: str = Field(..., alias="insertedId")


class UpdateResult(WriteResult):
    matched_count: int = Field(0, alias="matchedCount")
    modified_count: int = Field(0, alias="modifiedCount")
    upserted_id: Optional[str] = Field(None, alias="upsertedId")


class DeleteResult(WriteResult):
    deleted_count: int = Field(0, alias="deletedCount")


class CountResponse(BaseModel):
    count: int


class SuccessResponse(BaseModel):
    success: bool = True
