from pydantic import AliasChoices, BaseModel, Field

from almacen.app.schemas.antibiotic import AntibioticRead


class PanelRead(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True


class PanelPresence(BaseModel):
    code: str
    name: str
    exists: bool


class LinkReplace(BaseModel):
    codes: list[str] = Field(default_factory=list)


class LinkReplaceResult(BaseModel):
    ok: bool = True
    saved: int


class DispatchCreate(BaseModel):
    panel_id: int = Field(gt=0, validation_alias=AliasChoices("panel_id", "antibiograma_id"))
    units: int = Field(gt=0, validation_alias=AliasChoices("units", "unidades"))


class DispatchRead(BaseModel):
    ok: bool = True
    panel_id: int
    units: int
    affected: list[AntibioticRead]  # post-descuento, ordenado por nombre
