from pydantic import BaseModel, ConfigDict, field_validator

# 9999-12-31T23:59:59.999Z, the last instant a datetime can hold
MAX_EPOCH_MS = 253402300799999


class RevenueCatEvent(BaseModel):
    """The `event` object of a RevenueCat webhook delivery.

    Only the fields we act on are declared; RevenueCat sends many more
    (store, environment, price, ...) and they are kept as extras.
    """
    model_config = ConfigDict(extra="allow")

    id: str | None = None
    type: str | None = None
    app_user_id: str | int | None = None
    product_id: str | None = None

    # Epoch milliseconds
    expiration_at_ms: int | None = None
    event_timestamp_ms: int | None = None
    purchased_at_ms: int | None = None

    @field_validator("expiration_at_ms", "event_timestamp_ms", "purchased_at_ms")
    @classmethod
    def epoch_ms_in_range(cls, v: int | None) -> int | None:
        if v is not None and not 0 <= v <= MAX_EPOCH_MS:
            raise ValueError("epoch milliseconds out of range")
        return v


class RevenueCatWebhookIn(BaseModel):
    model_config = ConfigDict(extra="allow")

    api_version: str | None = None
    event: RevenueCatEvent
