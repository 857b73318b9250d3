from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, TypeAdapter, ValidationError

from app.models.user import UserRole

_email_adapter = TypeAdapter(EmailStr)

MIN_PASSWORD_LENGTH = 6

# String fields trimmed before they are stored
TRIMMED_FIELDS = ("name", "firstName", "lastName", "company", "role")


def is_valid_email(value: str) -> bool:
    try:
        _email_adapter.validate_python(value)
    except ValidationError:
        return False
    return True


def is_valid_role(value: str) -> bool:
    return value in {role.value for role in UserRole}


# Shared properties
class UserBase(BaseModel):
    name: Optional[str] = None
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    company: Optional[str] = None

    model_config = ConfigDict(extra="ignore")


# Properties to receive via API on creation
class UserCreate(UserBase):
    email: Optional[str] = None
    password: Optional[str] = None  # generated when omitted
    role: Optional[str] = None

    def validation_errors(self) -> List[str]:
        errors = []
        if not self.email:
            errors.append("Email is required")
        elif not is_valid_email(self.email.strip()):
            errors.append("Invalid email format")
        if self.password is not None and len(self.password) < MIN_PASSWORD_LENGTH:
            errors.append(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        if not self.role:
            errors.append("Role is required")
        elif not is_valid_role(self.role.strip()):
            errors.append("Invalid role")
        return errors


# Properties to receive via API on update
class UserUpdate(UserBase):
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None
    isActive: Optional[bool] = None
