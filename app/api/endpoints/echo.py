from fastapi import APIRouter
from pydantic import BaseModel, Field

router = APIRouter()


class PersonEcho(BaseModel):
    """JSON body posted by the client-side form."""
    fName: str = Field("", description="First name")
    lName: str = Field("", description="Last name")


class EchoResponse(BaseModel):
    message: str


@router.post("/person", response_model=EchoResponse)
async def echo_person(person: PersonEcho) -> EchoResponse:
    """Echo back the submitted name without storing anything."""
    return EchoResponse(message=f"add the user: {person.fName} {person.lName}")
