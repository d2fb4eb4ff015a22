from pydantic import AliasChoices, BaseModel, Field


class AntibioticRead(BaseModel):
    code: str
    name: str
    quantity: int
    minimum_threshold: int

    class Config:
        from_attributes = True


class AntibioticUpdate(BaseModel):
    """Actualización parcial: sólo se tocan los campos presentes."""

    quantity: int | None = Field(
        default=None,
        ge=0,
        validation_alias=AliasChoices("quantity", "cantidad"),
    )
    minimum_threshold: int | None = Field(
        default=None,
        ge=0,
        validation_alias=AliasChoices("minimum_threshold", "stock_minimo"),
    )

    def changes(self) -> dict[str, int]:
        return {
            field: value
            for field, value in (
                ("quantity", self.quantity),
                ("minimum_threshold", self.minimum_threshold),
            )
            if value is not None
        }


class SubtractRequest(BaseModel):
    quantity: int = Field(gt=0, validation_alias=AliasChoices("quantity", "cantidad"))


class AntibioticItemResponse(BaseModel):
    ok: bool = True
    item: AntibioticRead
