from pydantic import BaseModel, ConfigDict, Field


class AuthUser(BaseModel):
    """
    Claims carried by a shop access token.

    ``sub`` is the customer id as issued by the auth service. ``is_admin`` is
    trusted for routing only; admin endpoints also check the stored customer.
    """

    model_config = ConfigDict(populate_by_name=True)

    user_id: int = Field(..., alias="sub")
    is_admin: bool = False
    phone: str | None = None
