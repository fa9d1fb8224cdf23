import json
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError


class InitMessage(BaseModel):
    type: Literal["init"] = "init"
    content: str


class UpdateMessage(BaseModel):
    model_config = ConfigDict(strict=True)

    type: Literal["update"] = "update"
    content: str


class ErrorMessage(BaseModel):
    type: Literal["error"] = "error"
    message: str


RoomMessage = Annotated[
    Union[InitMessage, UpdateMessage, ErrorMessage],
    Field(discriminator="type"),
]

_room_message = TypeAdapter(RoomMessage)


def parse_client_frame(raw: str) -> Optional[UpdateMessage]:
    """
    Validate a frame received from a client. Clients may only send updates;
    anything else (bad JSON, other kinds, non-string content) yields None.
    """
    try:
        message = _room_message.validate_python(json.loads(raw))
    except (ValueError, ValidationError):
        return None
    if not isinstance(message, UpdateMessage):
        return None
    return message

