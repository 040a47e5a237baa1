from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field


class OrderLine(BaseModel):
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    product_id: str = Field(alias="productId")
    taille: str = ""
    quantite: int = Field(ge=1)
    nom_perso: str = Field(default="", alias="nomPerso")
    num_perso: str = Field(default="", alias="numPerso")


class CreateOrderRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    action: Literal["createOrder"] = "createOrder"
    club_id: str = Field(alias="clubId")
    club_nom: str = Field(default="", alias="clubNom")
    total: float = 0
    lignes: List[OrderLine] = Field(min_length=1)


class CreateDemandeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    action: Literal["createDemande"] = "createDemande"
    club_id: str = Field(alias="clubId")
    objet: str = ""
    message: str = ""
