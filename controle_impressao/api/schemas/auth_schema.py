# controle_impressao/api/schemas/auth_schema.py
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from controle_impressao.api.schemas.solicitation_schema import UserResponse


class LoginRequest(BaseModel):
    # credenciais do SUAP ou um token já emitido por ele
    username: Optional[str] = Field(default=None, min_length=1, max_length=100)
    password: Optional[str] = Field(default=None, min_length=1, max_length=200)
    suap_token: Optional[str] = Field(default=None, min_length=1)

    @model_validator(mode="after")
    def credentials_or_token(self):
        if not self.suap_token and not (self.username and self.password):
            raise ValueError("Informe usuário e senha ou um token do SUAP.")
        return self


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "Bearer"
    user: UserResponse
