"""Sample jewelry catalogue used to seed development and demo databases."""

import json

from protean.utils.globals import current_domain

from storefront.catalogue.creation import CreateProduct
from storefront.catalogue.product import Product, slugify
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

SAMPLE_PRODUCTS = [
    {
        "name": "Pink Heart Ring",
        "sku": "PIN-HEART-001",
        "description": "A delicate pink heart ring perfect for expressing love and affection.",
        "short_description": "Delicate pink heart ring",
        "price": 1800,
        "compare_price": 2200,
        "images": ["/images/pink-heart.jpg"],
        "category": "rings",
        "brand": "Trinkets",
        "material": "Silver",
        "gemstone": "Other",
        "weight": 2.5,
        "size": "7",
        "color": "pink",
        "style": "Elegant",
        "occasion": "Everyday",
        "stock": 15,
        "is_featured": True,
        "tags": ["heart", "pink", "romantic", "ring"],
    },
    {
        "name": "Purple Stone Ring",
        "sku": "PUR-STONE-001",
        "description": "An elegant purple stone ring that adds a touch of sophistication to any outfit.",
        "short_description": "Elegant purple stone ring",
        "price": 1200,
        "compare_price": 1500,
        "images": ["/images/purple-ring-cat.jpg"],
        "category": "rings",
        "brand": "Trinkets",
        "material": "Silver",
        "gemstone": "Amethyst",
        "weight": 3.2,
        "size": "7",
        "color": "purple",
        "style": "Elegant",
        "occasion": "Special Occasion",
        "stock": 12,
        "is_on_sale": True,
        "tags": ["purple", "stone", "elegant", "ring"],
    },
    {
        "name": "Gold Ring",
        "sku": "GOL-RING-001",
        "description": "A classic gold ring that never goes out of style. Perfect for everyday wear.",
        "short_description": "Classic gold ring",
        "price": 3500,
        "compare_price": 4000,
        "images": ["/images/gold-ring.jpg"],
        "category": "rings",
        "brand": "Trinkets",
        "material": "Gold",
        "gemstone": "None",
        "weight": 4.8,
        "size": "7",
        "color": "gold",
        "style": "Classic",
        "occasion": "Everyday",
        "stock": 8,
        "is_featured": True,
        "tags": ["gold", "classic", "everyday", "ring"],
    },
    {
        "name": "Pearl Drop Earrings",
        "sku": "PEA-DROP-001",
        "description": "Timeless pearl drop earrings that bring understated elegance to any look.",
        "short_description": "Timeless pearl drop earrings",
        "price": 1200,
        "images": ["/images/pearl-drop-earrings.jpg"],
        "category": "earrings",
        "brand": "Trinkets",
        "material": "Silver",
        "gemstone": "Pearl",
        "weight": 1.8,
        "size": "standard",
        "color": "white",
        "style": "Elegant",
        "occasion": "Special Occasion",
        "stock": 20,
        "is_on_sale": True,
        "tags": ["pearl", "drop", "timeless", "earrings"],
    },
    {
        "name": "Flower Earring",
        "sku": "FLO-EAR-001",
        "description": "Crystal flower earrings inspired by nature.",
        "short_description": "Crystal flower earrings",
        "price": 950,
        "images": ["/images/flower-earring.jpg"],
        "category": "earrings",
        "brand": "Trinkets",
        "material": "Silver",
        "gemstone": "Other",
        "weight": 1.2,
        "size": "standard",
        "color": "silver",
        "style": "Modern",
        "occasion": "Everyday",
        "stock": 18,
        "tags": ["flower", "crystal", "nature", "earrings"],
    },
    {
        "name": "Pearl Loop Earring",
        "sku": "PEA-LOOP-001",
        "description": "Elegant pearl loop earrings for everyday grace.",
        "short_description": "Elegant pearl loop earrings",
        "price": 1100,
        "images": ["/images/pearl-loop-earring.jpg"],
        "category": "earrings",
        "brand": "Trinkets",
        "material": "Silver",
        "gemstone": "Pearl",
        "weight": 2.1,
        "size": "standard",
        "color": "white",
        "style": "Elegant",
        "occasion": "Everyday",
        "stock": 16,
        "tags": ["pearl", "loop", "elegant", "earrings"],
    },
    {
        "name": "Flower Necklace",
        "sku": "FLO-NECK-001",
        "description": "A feminine crystal flower pendant on a fine silver chain.",
        "short_description": "Crystal flower necklace",
        "price": 1600,
        "images": ["/images/flower-necklace.jpg"],
        "category": "necklaces",
        "brand": "Trinkets",
        "material": "Silver",
        "gemstone": "Other",
        "weight": 5.2,
        "size": '18"',
        "color": "silver",
        "style": "Modern",
        "occasion": "Everyday",
        "stock": 14,
        "is_featured": True,
        "tags": ["flower", "crystal", "feminine", "necklace"],
    },
    {
        "name": "Silver Stud Necklace",
        "sku": "SIL-STUD-001",
        "description": "A minimalist silver stud necklace for layering or wearing alone.",
        "short_description": "Minimalist silver stud necklace",
        "price": 1400,
        "images": ["/images/silver-stud-necklace.jpg"],
        "category": "necklaces",
        "brand": "Trinkets",
        "material": "Silver",
        "gemstone": "Other",
        "weight": 3.8,
        "size": '18"',
        "color": "silver",
        "style": "Minimalist",
        "occasion": "Everyday",
        "stock": 22,
        "is_on_sale": True,
        "tags": ["silver", "stud", "minimalist", "necklace"],
    },
    {
        "name": "Diamond Necklace",
        "sku": "DIA-NECK-001",
        "description": "A luxurious white gold necklace set with a brilliant diamond.",
        "short_description": "Luxury diamond necklace",
        "price": 4500,
        "images": ["/images/diamond-necklace.jpg"],
        "category": "necklaces",
        "brand": "Trinkets",
        "material": "White Gold",
        "gemstone": "Diamond",
        "weight": 8.5,
        "size": '18"',
        "color": "white",
        "style": "Bold",
        "occasion": "Special Occasion",
        "stock": 6,
        "is_featured": True,
        "tags": ["diamond", "luxury", "formal", "necklace"],
    },
    {
        "name": "Gold Chain Bracelet",
        "sku": "GOL-CHAIN-001",
        "description": "A classic gold chain bracelet with a secure clasp.",
        "short_description": "Classic gold chain bracelet",
        "price": 2800,
        "images": ["/images/gold-chain-bracelet.jpg"],
        "category": "bracelets",
        "brand": "Trinkets",
        "material": "Gold",
        "gemstone": "None",
        "weight": 6.2,
        "size": '7"',
        "color": "gold",
        "style": "Classic",
        "occasion": "Everyday",
        "stock": 10,
        "is_on_sale": True,
        "tags": ["gold", "chain", "classic", "bracelet"],
    },
]


def seed_catalogue(products=None) -> list[str]:
    """Add the sample products that are not in the catalogue yet.

    Must be called inside an active domain context. Returns the ids of the
    products that were created.
    """
    repo = current_domain.repository_for(Product)
    created = []
    for data in products if products is not None else SAMPLE_PRODUCTS:
        if repo.find_by_slug(data.get("slug") or slugify(data["name"])):
            logger.info("seed_product_skipped", name=data["name"])
            continue

        payload = dict(data)
        for key in ("images", "tags"):
            if key in payload:
                payload[key] = json.dumps(payload[key])

        created.append(current_domain.process(CreateProduct(**payload), asynchronous=False))

    logger.info("catalogue_seeded", created=len(created))
    return created
