"""Product catalog backed by the document store"""

import logging
from datetime import datetime, timezone
from typing import Optional

from ..models.product import Product, ProductCategory
from .store import DocumentStore

logger = logging.getLogger(__name__)

PRODUCTS_COLLECTION = "products"

PATEL_AGRO_PINCODES = ["380015", "380050", "380051", "380052"]
KISAN_SEVA_PINCODES = ["380052", "395001", "395006", "395007"]

# Demo catalog loaded at startup when seed_catalog is enabled
PRODUCTS: dict[str, Product] = {
    "prod-001": Product(
        id="prod-001",
        seller_id="seller-001",
        seller_name="Patel Agro Centre",
        seller_pincode="380052",
        name="Urea Fertilizer 45kg",
        description="Neem-coated urea, 46% nitrogen. Suitable for all field crops.",
        category=ProductCategory.FERTILIZERS,
        price=266.50,
        unit="bag",
        stock=120,
        covered_pincodes=PATEL_AGRO_PINCODES,
    ),
    "prod-002": Product(
        id="prod-002",
        seller_id="seller-001",
        seller_name="Patel Agro Centre",
        seller_pincode="380052",
        name="DAP 50kg",
        description="Di-ammonium phosphate for basal application at sowing.",
        category=ProductCategory.FERTILIZERS,
        price=1350.00,
        unit="bag",
        stock=40,
        covered_pincodes=PATEL_AGRO_PINCODES,
    ),
    "prod-003": Product(
        id="prod-003",
        seller_id="seller-001",
        seller_name="Patel Agro Centre",
        seller_pincode="380052",
        name="Hybrid Cotton Seeds BG-II",
        description="Bollgard II hybrid cotton, 475g packet.",
        category=ProductCategory.SEEDS,
        price=864.00,
        unit="packet",
        stock=8,
        covered_pincodes=PATEL_AGRO_PINCODES,
    ),
    "prod-004": Product(
        id="prod-004",
        seller_id="seller-002",
        seller_name="Kisan Seva Kendra",
        seller_pincode="395007",
        name="Imidacloprid 17.8% SL",
        description="Systemic insecticide for sucking pests. 250ml bottle.",
        category=ProductCategory.PESTICIDES,
        price=420.00,
        unit="bottle",
        stock=60,
        covered_pincodes=KISAN_SEVA_PINCODES,
    ),
    "prod-005": Product(
        id="prod-005",
        seller_id="seller-002",
        seller_name="Kisan Seva Kendra",
        seller_pincode="395007",
        name="Drip Irrigation Kit (1 acre)",
        description="16mm laterals, inline drippers, filter and fittings.",
        category=ProductCategory.IRRIGATION,
        price=18500.00,
        unit="kit",
        stock=6,
        covered_pincodes=KISAN_SEVA_PINCODES,
    ),
    "prod-006": Product(
        id="prod-006",
        seller_id="seller-002",
        seller_name="Kisan Seva Kendra",
        seller_pincode="395007",
        name="Vermicompost 25kg",
        description="Organic earthworm compost, sieved.",
        category=ProductCategory.ORGANIC,
        price=350.00,
        unit="bag",
        stock=200,
        covered_pincodes=KISAN_SEVA_PINCODES,
    ),
    "prod-007": Product(
        id="prod-007",
        seller_id="seller-003",
        seller_name="Saurashtra Tools",
        seller_pincode="360001",
        name="Battery Knapsack Sprayer 16L",
        description="12V battery sprayer with brass lance.",
        category=ProductCategory.TOOLS,
        price=2899.00,
        unit="piece",
        stock=15,
        # Seller has not configured delivery areas yet
        covered_pincodes=[],
    ),
}


def product_to_document(product: Product) -> dict:
    """Serialize a product for the document store (the ID is the key)"""
    return product.model_dump(exclude={"id"})


def product_from_document(doc_id: str, data: dict) -> Product:
    return Product.model_validate({**data, "id": doc_id})


class ProductDatabase:
    """Product reads and catalog seeding over the document store"""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def seed(self, products: Optional[dict[str, Product]] = None) -> int:
        """Load a catalog into the store, replacing existing documents"""
        products = PRODUCTS if products is None else products
        for product_id, product in products.items():
            await self.store.set_document(
                PRODUCTS_COLLECTION, product_id, product_to_document(product)
            )
        logger.info(f"Seeded {len(products)} products")
        return len(products)

    async def add_product(self, product: Product) -> Product:
        """Create or replace a single product"""
        await self.store.set_document(
            PRODUCTS_COLLECTION, product.id, product_to_document(product)
        )
        return product

    async def get_product(self, product_id: str) -> Optional[Product]:
        """Get a product by ID"""
        data = await self.store.get_document(PRODUCTS_COLLECTION, product_id)
        if data is None:
            return None
        return product_from_document(product_id, data)

    async def get_all_products(self) -> list[Product]:
        """Get all products"""
        docs = await self.store.list_documents(PRODUCTS_COLLECTION)
        return [product_from_document(doc_id, data) for doc_id, data in docs]

    async def search_products(
        self,
        query: Optional[str] = None,
        category: Optional[ProductCategory] = None,
        seller_id: Optional[str] = None,
        pincode: Optional[str] = None,
        in_stock_only: bool = True,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[Product], int]:
        """
        Search active products with filters.

        Returns:
            Tuple of (matching products, total count)
        """
        results = [p for p in await self.get_all_products() if p.is_active]

        if query:
            query_lower = query.lower()
            results = [
                p for p in results
                if query_lower in p.name.lower() or query_lower in p.description.lower()
            ]

        if category:
            results = [p for p in results if p.category == category]

        if seller_id:
            results = [p for p in results if p.seller_id == seller_id]

        # Only products deliverable to the buyer's PIN code
        if pincode:
            results = [p for p in results if pincode in p.covered_pincodes]

        if in_stock_only:
            results = [p for p in results if p.in_stock]

        total = len(results)
        results = results[offset : offset + limit]

        return results, total

    async def set_seller_coverage(
        self,
        seller_id: str,
        seller_pincode: str,
        covered_pincodes: list[str],
    ) -> int:
        """
        Apply a delivery area to every product of a seller in one batch.

        Returns:
            Number of products updated
        """
        product_ids = [p.id for p in await self.get_all_products() if p.seller_id == seller_id]
        if not product_ids:
            return 0

        now = datetime.now(timezone.utc)
        batch = self.store.batch()
        for product_id in product_ids:
            batch.update(
                PRODUCTS_COLLECTION,
                product_id,
                {
                    "seller_pincode": seller_pincode,
                    "covered_pincodes": list(covered_pincodes),
                    "updated_at": now,
                },
            )
        await batch.commit()

        logger.info(
            f"Seller {seller_id} now covers {len(covered_pincodes)} pincodes "
            f"across {len(product_ids)} products"
        )
        return len(product_ids)
