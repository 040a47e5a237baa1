from typing import List

from pydantic import BaseModel, ConfigDict, Field


class _WireModel(BaseModel):
    """Snake-case fields serialised with the storefront's camelCase keys."""

    model_config = ConfigDict(populate_by_name=True)


class Club(_WireModel):
    id: str
    nom: str
    email: str
    logo_club: str = Field(alias="logoClub")
    min_commande: float = Field(alias="minCommande")
    active_min: bool = Field(alias="activeMin")


class Product(_WireModel):
    id: str
    nom: str
    image: str
    prix: float
    tailles: List[str]
    personnalisation: str
    categorie: str
    description: str
    min_quantite: int = Field(alias="minQuantite")
    max_quantite: int = Field(alias="maxQuantite")
    groupe_stock: str = Field(alias="groupeStock")
    stock_groupe: int = Field(alias="stockGroupe")


class Order(_WireModel):
    ref: str
    date: str
    nb_articles: float = Field(alias="nbArticles")
    total: float
    statut: str


class Demande(_WireModel):
    id: str
    objet: str
    message: str
    date: str
    statut: str
    reponse: str
