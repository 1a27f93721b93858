import uuid
from core.db import Base

def new_id() -> str:
    return uuid.uuid4().hex
