from pydantic import BaseModel


class QuoteOut(BaseModel):
    id: str
    text: str
    author: str
