from pydantic import BaseModel


class TeamRead(BaseModel):
    team_id: int
    team_name: str
    category: str
    author_name: str | None = None
    role: str

    class Config:
        from_attributes = True
