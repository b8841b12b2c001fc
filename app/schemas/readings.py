from pydantic import BaseModel, ConfigDict

from app.schemas.base import CamelModel


class UserProfile(CamelModel):
    model_config = ConfigDict(extra="ignore")

    age_range: str | None = None
    gender: str | None = None  # male | female | other
    emotional_state: str | None = None  # hopeful | worried | confused | happy | sad


class ConversationTurn(BaseModel):
    model_config = ConfigDict(extra="ignore")

    role: str = "user"  # user | assistant
    text: str = ""


class TarotReadingIn(CamelModel):
    model_config = ConfigDict(extra="ignore")

    topic: str | None = None
    topic_name: str | None = None
    question: str | None = None
    package_type: str | None = "basic"
    card_count: int | None = 1
    user_profile: UserProfile | None = None
    is_follow_up: bool | None = False
    conversation_history: list[ConversationTurn] | None = None


class TarotReadingOut(BaseModel):
    reading: str
    success: bool = True
