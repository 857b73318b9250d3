from pydantic import BaseModel, ConfigDict

from app.models.user import UserRole


class Identity(BaseModel):
    """Caller identity resolved from a signed token or the identity headers."""
    email: str
    role: str

    model_config = ConfigDict(frozen=True)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    @property
    def is_client(self) -> bool:
        return self.role == UserRole.CLIENT.value
