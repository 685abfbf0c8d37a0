from pydantic import BaseModel, Field, model_validator
from typing import Optional, List, Dict, Any, Union, Literal, Annotated
from datetime import datetime

ActivityType = Literal["quiz", "quest", "lesson", "flashcard", "roleplay"]
ActivityStatus = Literal["draft", "private_group", "link", "public"]


class GeneratedQuiz(BaseModel):
    question: str
    explanation: str = ""
    type: Literal["multiple_choice", "subjective"] = "multiple_choice"
    options: List[str] = []
    correct_answer: int = 0
    model_answer: Optional[str] = None

    class Config:
        protected_namespaces = ()

    @model_validator(mode="after")
    def check_answer_index(self):
        if self.type == "multiple_choice" and self.options:
            if not 0 <= self.correct_answer < len(self.options):
                raise ValueError("correct_answer must index into options")
        return self


class QuestStage(BaseModel):
    title: str
    lesson: str = ""
    quizzes: List[GeneratedQuiz] = []


class LessonModule(BaseModel):
    title: str
    content_blocks: List[Dict[str, Any]] = []


class Flashcard(BaseModel):
    front: str
    back: str


class _QuestBase(BaseModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    thumbnail: Optional[str] = None
    tags: Optional[List[str]] = None


class GeneratedSmartQuiz(_QuestBase):
    type: Literal["quiz"] = "quiz"
    quizzes: List[GeneratedQuiz] = []


class GeneratedQuestCourse(_QuestBase):
    type: Literal["quest"] = "quest"
    stages: List[QuestStage] = []


class GeneratedLesson(_QuestBase):
    type: Literal["lesson"] = "lesson"
    modules: List[LessonModule] = []


class GeneratedFlashcards(_QuestBase):
    type: Literal["flashcard"] = "flashcard"
    cards: List[Flashcard] = []


GeneratedQuest = Annotated[
    Union[GeneratedSmartQuiz, GeneratedQuestCourse, GeneratedLesson, GeneratedFlashcards],
    Field(discriminator="type"),
]


class ThemeConfig(BaseModel):
    theme: Literal["adventure", "space", "fantasy", "science"] = "adventure"
    max_lives: int = Field(default=3, alias="maxLives", ge=1)
    lives_enabled: bool = Field(default=True, alias="livesEnabled")
    timer_enabled: bool = Field(default=False, alias="timerEnabled")
    timer_seconds: int = Field(default=30, alias="timerSeconds", ge=1)

    class Config:
        populate_by_name = True


class SaveActivityRequest(BaseModel):
    quest: GeneratedQuest
    raw_content: str = ""
    theme_config: ThemeConfig = ThemeConfig()
    category_id: Optional[str] = None


class SaveActivityResponse(BaseModel):
    activity_id: str
    success: bool = True


class ActivityDetailResponse(BaseModel):
    activity: Dict[str, Any]
    generated_quest: Dict[str, Any]
    theme_config: Dict[str, Any]


class AllowedEmailsUpdate(BaseModel):
    emails: List[str]


class CanPlayResult(BaseModel):
    can_play: bool
    reason: str
    available_from: Optional[datetime] = None
    available_until: Optional[datetime] = None
    plays_used: Optional[int] = None
    plays_remaining: Optional[int] = None
    replay_limit: Optional[int] = None


class RecordPlayRequest(BaseModel):
    score: Optional[int] = None
    duration_seconds: Optional[int] = Field(default=None, ge=0)
    completed: bool = False


class RecordPlayResponse(BaseModel):
    play_record_id: str
    success: bool = True


class UpdatePlayRecordRequest(BaseModel):
    score: int
    duration_seconds: int = Field(ge=0)
    completed: bool


class ActivePlaySession(BaseModel):
    play_record_id: str
    started_at: datetime
    time_limit_minutes: Optional[int] = None
    available_until: Optional[datetime] = None
    is_expired: bool
    remaining_seconds: Optional[int] = None


class ActivitySettingsUpdate(BaseModel):
    replay_limit: Optional[int] = Field(default=None, ge=1)
    time_limit_minutes: Optional[int] = Field(default=None, ge=1)
    available_from: Optional[datetime] = None
    available_until: Optional[datetime] = None
    age_range: Optional[str] = None

    @model_validator(mode="after")
    def check_window(self):
        if self.available_from and self.available_until and self.available_from >= self.available_until:
            raise ValueError("available_from must be before available_until")
        return self


class RecentPlay(BaseModel):
    id: str
    activity_id: str
    activity_title: str
    activity_thumbnail: Optional[str] = None
    played_at: datetime
    score: Optional[int] = None
    completed: bool


class UserStats(BaseModel):
    total_activities_played: int
    total_score: int
    completed_activities: int
    recent_plays: List[RecentPlay]


class ActivityResult(BaseModel):
    id: str
    activity_id: str
    activity_title: str
    activity_thumbnail: Optional[str] = None
    activity_type: str
    played_at: datetime
    score: Optional[int] = None
    completed: bool
    time_spent: Optional[int] = None


class ActivityResultsResponse(BaseModel):
    results: List[ActivityResult]
    total: int
    page: int
    page_size: int
    has_more: bool


class SuggestRequest(BaseModel):
    content: str
    limit: int = Field(default=5, ge=1, le=20)


class SuggestedActivity(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    thumbnail: Optional[str] = None
    type: str
    play_count: int = 0
    tags: Optional[List[str]] = None
