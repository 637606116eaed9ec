"""
Database Schemas for the Hobit fitness-challenge app

Challenge records come from the bundled dataset. Program and User documents
live in MongoDB (collections "programs" and "users"). Keys are camelCase both
on the wire and in the store.
"""
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class Challenge(BaseModel):
    day: int = Field(..., description="Day number inside its program, starting at 1")
    category: str = Field(..., description="Program the challenge belongs to")
    title: str = Field(...)
    description: str = Field(...)


class Program(BaseModel):
    category: str = Field(...)
    challenges: List[Challenge] = Field(default_factory=list, description="In dataset order")


class ActiveProgram(CamelModel):
    category: Optional[str] = None
    day: Optional[int] = None
    start_date: Optional[str] = Field(None, alias="startDate")


class ProgramProgress(CamelModel):
    active_program: ActiveProgram = Field(default_factory=ActiveProgram, alias="activeProgram")
    # Append-only, duplicates are kept
    completed_programs: List[str] = Field(default_factory=list, alias="completedPrograms")


class User(CamelModel):
    id: Optional[str] = Field(None, description="Store-assigned id, unset before insert")
    username: str = Field(..., description="Unique login name")
    password_hash: str = Field(..., alias="passwordHash", description="bcrypt hash")
    access_token: str = Field(..., alias="accessToken", description="Opaque bearer token, fixed at creation")
    programs: ProgramProgress = Field(default_factory=ProgramProgress)


# --------------------------
# Request bodies
# --------------------------
class Credentials(BaseModel):
    username: str
    password: str


class UpdateActiveProgram(CamelModel):
    category: Optional[str] = None
    day: Optional[int] = None
    start_date: Optional[str] = Field(None, alias="startDate")


class AddCompletedProgram(CamelModel):
    program_name: str = Field(..., alias="programName")
