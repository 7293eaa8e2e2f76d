from pydantic import BaseModel, Field, field_validator

from planitech.features.users.schemas import UserOut, _check_email

# ---------- Inputs ----------

class RegisterIn(BaseModel):
    username: str = Field(min_length=3, max_length=50)
    email: str = Field(max_length=100)
    password: str = Field(min_length=8, max_length=128)
    first_name: str = Field("", max_length=50)
    last_name: str = Field("", max_length=50)

    @field_validator("email")
    @classmethod
    def check_email(cls, value):
        return _check_email(value)

class LoginIn(BaseModel):
    username: str = Field(min_length=1, description="Nom d'utilisateur ou email")
    password: str = Field(min_length=1)


# ---------- Outputs ----------

class AuthOut(BaseModel):
    message: str
    token: str
    token_type: str = "bearer"
    expires_in: int  # secondes
    user: UserOut
