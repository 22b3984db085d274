"""Контракт пользователей: внешние профили, команды и представления."""

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field, RootModel

from helpdesk.shared.schemas.ids import UserId


class TelegramProfile(BaseModel):
    id: int
    first_name: str
    last_name: Optional[str] = None
    username: Optional[str] = None
    photo_url: Optional[str] = None

    @property
    def display_name(self) -> str:
        if self.last_name:
            return f"{self.first_name} {self.last_name}"
        return self.first_name

    @property
    def identity_key(self) -> str:
        return f"telegram-{self.id}"


class UniversityProfile(BaseModel):
    email: str
    commonname: str
    family_name: str
    given_name: str

    @property
    def display_name(self) -> str:
        return self.commonname

    @property
    def identity_key(self) -> str:
        return f"university-{self.email}"


class TelegramUserProfile(TelegramProfile):
    type: Literal["Telegram"] = "Telegram"

    def to_identity(self) -> TelegramProfile:
        return TelegramProfile(**self.model_dump(exclude={"type"}))


class UniversityUserProfile(UniversityProfile):
    type: Literal["University"] = "University"

    def to_identity(self) -> UniversityProfile:
        return UniversityProfile(**self.model_dump(exclude={"type"}))


# Профиль внешнего провайдера, помеченный полем type
ExternalUserProfile = Annotated[
    Union[TelegramUserProfile, UniversityUserProfile],
    Field(discriminator="type"),
]


class UserIdentities(BaseModel):
    telegram: Optional[TelegramProfile] = None
    university: Optional[UniversityProfile] = None

    def slot_for(self, profile: Union[TelegramUserProfile, UniversityUserProfile]) -> str:
        return "telegram" if isinstance(profile, TelegramUserProfile) else "university"

    def can_add_identity(self, profile: Union[TelegramUserProfile, UniversityUserProfile]) -> bool:
        return getattr(self, self.slot_for(profile)) is None

    def with_identity(self, profile: Union[TelegramUserProfile, UniversityUserProfile]) -> "UserIdentities":
        return self.model_copy(update={self.slot_for(profile): profile.to_identity()})

    def display_name(self) -> str:
        """Имя из самого авторитетного профиля: университетский важнее Telegram."""
        if self.university is not None:
            return self.university.display_name
        if self.telegram is not None:
            return self.telegram.display_name
        return ""

    def identity_keys(self) -> list:
        return [p.identity_key for p in (self.telegram, self.university) if p is not None]


# === Команды ===


class CreateUser(BaseModel):
    type: Literal["Create"] = "Create"
    profile: ExternalUserProfile


class AddUserIdentity(BaseModel):
    type: Literal["AddIdentity"] = "AddIdentity"
    profile: ExternalUserProfile


class UserCommand(RootModel):
    root: Annotated[Union[CreateUser, AddUserIdentity], Field(discriminator="type")]


# === Представления ===


class UserProfileView(BaseModel):
    id: UserId
    name: str


class UserView(BaseModel):
    id: UserId
    name: str
    identities: UserIdentities

    def profile(self) -> UserProfileView:
        return UserProfileView(id=self.id, name=self.name)


class IdentityView(BaseModel):
    user_id: UserId


class TelegramLoginData(TelegramProfile):
    """Данные виджета Telegram Login: профиль, время авторизации и подпись."""

    auth_date: int
    hash: str

    def profile(self) -> TelegramUserProfile:
        return TelegramUserProfile(**self.model_dump(exclude={"auth_date", "hash"}))
