from typing import Annotated
from pydantic import Field

# Calendar month identifier, e.g. "2024-07"
Period = Annotated[str, Field(pattern=r"^\d{4}-(0[1-9]|1[0-2])$", examples=["2024-07"])]

ItemScore = Annotated[float, Field(ge=0, le=10)]
