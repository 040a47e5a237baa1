"""Club "vestiaire" operations backed by Airtable tables.

Each operation returns the payload sent to the storefront: a dict keyed by
the result name (``club``, ``products``, ``orders``, ...).  Airtable errors
propagate as :class:`~app.services.airtable_client.AirtableError`.
"""

import asyncio
import logging
import re
import time
from typing import Any, Dict, List, Optional

from app.config import Settings
from app.models.order_request import CreateDemandeRequest, CreateOrderRequest
from app.models.vestiaire import Club, Demande, Order, Product
from app.services.airtable_client import AirtableClient
from app.services.normalizer import format_date, to_float, to_int, to_list, to_text

logger = logging.getLogger(__name__)

PENDING_PAYMENT = "🟡 EN ATTENTE DE PAIEMENT"
NOT_SEEN = "❌"
NEW_DEMANDE = "Nouvelle"
DEMANDES_DISABLED = "Table Demandes non configurée"

_NON_ALNUM_RE = re.compile(r"[^A-Z0-9]")


def _linked_to(record: Dict[str, Any], club_id: str) -> bool:
    """Return True when the record's first linked ``Club`` is *club_id*."""
    link = record.get("fields", {}).get("Club")
    return bool(link) and link[0] == club_id


def _matches_email(fields: Dict[str, Any], email: str) -> bool:
    email = email.lower()
    single = to_text(fields.get("email"))
    if single and single.lower() == email:
        return True
    return email in (entry.lower() for entry in to_list(fields.get("Emails")))


def order_reference(club_nom: str, now_ms: Optional[int] = None) -> str:
    """Build an order reference such as ``CMD-FCNANTES-123456``."""
    club = _NON_ALNUM_RE.sub("", (club_nom or "CLUB").upper())
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"CMD-{club}-{str(now_ms)[-6:]}"


async def get_club(airtable: AirtableClient, settings: Settings, email: str) -> Dict[str, Any]:
    records = await airtable.list_records(settings.airtable_table_clubs)
    logger.info("Looking up club", extra={"records": len(records)})

    record = next((r for r in records if _matches_email(r.get("fields", {}), email)), None)
    if record is None:
        return {"club": None}

    fields = record.get("fields", {})
    club = Club(
        id=record["id"],
        nom=to_text(fields.get("Nom")),
        email=to_text(fields.get("email")),
        logo_club=to_text(fields.get("Logo Club URL")),
        min_commande=to_float(fields.get("Minimum Commande")),
        active_min=bool(fields.get("Active Minimum")),
    )
    return {"club": club.model_dump(by_alias=True)}


async def get_catalogue(
    airtable: AirtableClient, settings: Settings, club_nom: str
) -> Dict[str, Any]:
    """Return the products visible in the vestiaire of *club_nom*."""
    records = await airtable.list_records(settings.airtable_table_produits)

    products: List[Dict[str, Any]] = []
    for record in records:
        fields = record.get("fields", {})
        if not fields.get("Visible Vestiaire") or fields.get("Expiré"):
            continue
        if not fields.get("Club") or fields["Club"] != club_nom:
            continue
        product = Product(
            id=record["id"],
            nom=to_text(fields.get("Nom")),
            image=to_text(fields.get("Image URL")),
            prix=to_float(fields.get("Prix Vente Club")),
            tailles=to_list(fields.get("Tailles disponibles")),
            personnalisation=to_text(fields.get("Personnalisation")) or "Aucune",
            categorie=to_text(fields.get("Type")),
            description=to_text(fields.get("Description")),
            min_quantite=to_int(fields.get("Min Quantité")),
            max_quantite=to_int(fields.get("Max Quantité")),
            groupe_stock=to_text(fields.get("Groupe Stock")),
            stock_groupe=to_int(fields.get("Stock Groupe")),
        )
        products.append(product.model_dump(by_alias=True))
    return {"products": products}


async def get_orders(airtable: AirtableClient, settings: Settings, club_id: str) -> Dict[str, Any]:
    records = await airtable.list_records(settings.airtable_table_commandes)
    orders = [
        Order(
            ref=to_text(r["fields"].get("Référence")),
            date=format_date(r["fields"].get("Date")),
            nb_articles=to_float(r["fields"].get("Nb Articles")),
            total=to_float(r["fields"].get("Total")),
            statut=to_text(r["fields"].get("Statut")) or PENDING_PAYMENT,
        ).model_dump(by_alias=True)
        for r in records
        if _linked_to(r, club_id)
    ]
    return {"orders": orders}


async def get_demandes(
    airtable: AirtableClient, settings: Settings, club_id: str
) -> Dict[str, Any]:
    """Return the requests of *club_id*, most recent first.

    Airtable lists records in creation order, so the newest come last.
    """
    if not settings.airtable_table_demandes:
        return {"demandes": [], "error": DEMANDES_DISABLED}

    records = await airtable.list_records(settings.airtable_table_demandes)
    demandes = [
        Demande(
            id=r["id"],
            objet=to_text(r["fields"].get("Objet")),
            message=to_text(r["fields"].get("Message")),
            date=format_date(r["fields"].get("Date")),
            statut=to_text(r["fields"].get("Statut")) or NEW_DEMANDE,
            reponse=to_text(r["fields"].get("Réponse")),
        ).model_dump(by_alias=True)
        for r in records
        if _linked_to(r, club_id)
    ]
    demandes.reverse()
    return {"demandes": demandes}


async def create_order(
    airtable: AirtableClient, settings: Settings, payload: CreateOrderRequest
) -> Dict[str, Any]:
    """Create an order and its lines.

    The order record is created first; its lines are then created
    concurrently and awaited together.  Any failure propagates.
    """
    ref = order_reference(payload.club_nom)
    total_articles = sum(line.quantite for line in payload.lignes)

    order = await airtable.create_record(
        settings.airtable_table_commandes,
        {
            "Référence": ref,
            "Club": [payload.club_id],
            "Statut": PENDING_PAYMENT,
            "Vu": NOT_SEEN,
            "Total": payload.total,
            "Nb Articles": total_articles,
        },
    )

    await asyncio.gather(
        *(
            airtable.create_record(
                settings.airtable_table_lignes,
                {
                    "Commande": [order["id"]],
                    "Produit": [line.product_id],
                    "Taille": line.taille,
                    "Quantité": line.quantite,
                    "Nom Personnalisation": line.nom_perso,
                    "Numéro Personnalisation": line.num_perso,
                },
            )
            for line in payload.lignes
        )
    )
    logger.info("Order created", extra={"ref": ref, "lines": len(payload.lignes)})
    return {"success": True, "orderRef": ref}


async def create_demande(
    airtable: AirtableClient, settings: Settings, payload: CreateDemandeRequest
) -> Dict[str, Any]:
    if not settings.airtable_table_demandes:
        return {"success": False, "error": DEMANDES_DISABLED}

    await airtable.create_record(
        settings.airtable_table_demandes,
        {
            "Club": [payload.club_id],
            "Objet": payload.objet,
            "Message": payload.message,
            "Statut": NEW_DEMANDE,
        },
    )
    return {"success": True}
