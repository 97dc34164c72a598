"""Collection variants.

Each variant bundles everything the provisioner and the search pipeline need
to know about one collection: its name, validator schema, index set, where
the rando identity is stored, and how documents map to Rando models.

- randoBase (v0): identity stored as the document primary key "_id"
- randoCustom (v1): identity stored as a unique "randoID" attribute; the
  storage-assigned "_id" is never exposed
"""
import copy
from dataclasses import dataclass
from typing import Dict, FrozenSet, Tuple

from pymongo import ASCENDING, DESCENDING, IndexModel

from errors import UnknownCollectionError
from models import Rando

IDENTITY_FIELD = "randoID"
PRIMARY_KEY = "_id"

COLLECTION_RANDO_BASE = "randoBase"
COLLECTION_RANDO_CUSTOM = "randoCustom"

COLORS = ("red", "orange", "yellow", "green", "blue", "indigo", "violet")

# Model attribute name -> document attribute name
_ATTRIBUTES = {
    "created_at": "createdAt",
    "email": "email",
    "favorite_color": "favoriteColor",
    "first_name": "firstName",
    "last_name": "lastName",
    "updated_at": "updatedAt",
}

_BASE_PROPERTIES = {
    "createdAt": {
        "bsonType": "date",
        "description": "Date the user was created",
    },
    "email": {
        "bsonType": "string",
        "description": "Email address of the user",
    },
    "favoriteColor": {
        "bsonType": "string",
        "description": "Favorite color of the user",
    },
    "firstName": {
        "bsonType": "string",
        "description": "First name of the user",
    },
    "lastName": {
        "bsonType": "string",
        "description": "Last name of the user",
    },
    "updatedAt": {
        "bsonType": "date",
        "description": "Date the user was last updated",
    },
}

_IDENTITY_PROPERTY = {
    "bsonType": "string",
    "description": "Unique identifier for the user",
}


def _schema(with_identity: bool) -> dict:
    properties = copy.deepcopy(_BASE_PROPERTIES)
    if with_identity:
        properties[IDENTITY_FIELD] = dict(_IDENTITY_PROPERTY)
    return {
        "bsonType": "object",
        "required": sorted(properties),
        "properties": properties,
    }


def _base_indexes() -> Tuple[IndexModel, ...]:
    return (
        IndexModel([("createdAt", ASCENDING)]),
        IndexModel([("email", ASCENDING)], unique=True),
        IndexModel([("favoriteColor", DESCENDING)]),
        IndexModel([("updatedAt", DESCENDING)]),
    )


@dataclass(frozen=True)
class RandoVariant:
    """Strategy describing one rando collection"""
    collection: str
    version: str
    schema: Dict
    indexes: Tuple[IndexModel, ...]
    identity_key: str

    def field_names(self) -> FrozenSet[str]:
        """Public field names that may be filtered, sorted or projected"""
        return frozenset(self.schema["properties"]) | {IDENTITY_FIELD}

    def bson_type(self, field_name: str) -> str:
        if field_name == IDENTITY_FIELD:
            return "string"
        return self.schema["properties"][field_name]["bsonType"]

    def storage_key(self, field_name: str) -> str:
        """Document attribute backing a public field name"""
        if field_name == IDENTITY_FIELD:
            return self.identity_key
        return field_name

    def decode(self, document: dict) -> Rando:
        """Build a Rando from a stored document"""
        values = {
            attr: document[key] for attr, key in _ATTRIBUTES.items() if key in document
        }
        if self.identity_key in document:
            values["rando_id"] = document[self.identity_key]
        return Rando(**values)

    def encode(self, rando: Rando) -> dict:
        """Build a storable document from a Rando"""
        document = {self.identity_key: rando.rando_id}
        for attr, key in _ATTRIBUTES.items():
            document[key] = getattr(rando, attr)
        return document


BASE = RandoVariant(
    collection=COLLECTION_RANDO_BASE,
    version="v0",
    schema=_schema(with_identity=False),
    indexes=_base_indexes(),
    identity_key=PRIMARY_KEY,
)

CUSTOM = RandoVariant(
    collection=COLLECTION_RANDO_CUSTOM,
    version="v1",
    schema=_schema(with_identity=True),
    indexes=_base_indexes() + (IndexModel([(IDENTITY_FIELD, ASCENDING)], unique=True),),
    identity_key=IDENTITY_FIELD,
)

VARIANTS = {variant.collection: variant for variant in (BASE, CUSTOM)}


def get_variant(collection: str) -> RandoVariant:
    """Look up a variant by collection name

    Raises:
        UnknownCollectionError: no definition exists for the collection
    """
    try:
        return VARIANTS[collection]
    except KeyError:
        raise UnknownCollectionError(collection) from None
