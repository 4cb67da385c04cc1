from pydantic import BaseModel, ConfigDict


class Identity(BaseModel):
    model_config = ConfigDict(frozen=True)

    employee_uid: str
    role_id: int
    organization_id: int
    full_name: str = ""
