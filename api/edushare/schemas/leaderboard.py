from pydantic import BaseModel, Field


class LeaderboardEntry(BaseModel):
    """One ranked user. `score` duplicates weeklyScore for older clients."""
    id: int
    username: str
    weekly_score: int = Field(alias='weeklyScore')
    lifetime_score: int = Field(alias='lifetimeScore')
    score: int

    class Config:
        populate_by_name = True


class LeaderboardResponse(BaseModel):
    success: bool = True
    leaderboard: list[LeaderboardEntry]
