"""Product content for the order desk"""

from typing import Optional
from ..models.product import PackSizeOffer, Product

# Product content as supplied by the CMS
PRODUCTS: dict[str, Product] = {
    "hydraulic-oil-iso-46": Product(
        slug="hydraulic-oil-iso-46",
        title="Hydraulic Oil ISO 46",
        summary="Anti-wear hydraulic fluid for industrial and mobile plant.",
        viscosity_grade="ISO VG 46",
        approvals=["DIN 51524 Part 2 HLP", "Denison HF-0"],
        main_image_url="/static/images/hydraulic-46.jpg",
        pack_sizes=[
            PackSizeOffer(label="20L", sku="HYD46-20", lead_time="Next day", moq="1"),
            PackSizeOffer(label="205L", sku="HYD46-205", lead_time="2-3 days", moq="1"),
            PackSizeOffer(label="1000L", sku="HYD46-IBC", lead_time="3-5 days", moq="1", notes="IBC, returnable"),
        ],
        unavailable_pack_sizes=["1L", "208L"],
    ),
    "engine-oil-15w40": Product(
        slug="engine-oil-15w40",
        title="Heavy Duty Engine Oil 15W-40",
        summary="Mineral diesel engine oil for mixed fleets.",
        viscosity_grade="SAE 15W-40",
        approvals=["API CI-4", "ACEA E7"],
        main_image_url="/static/images/engine-15w40.jpg",
        pack_sizes=[
            PackSizeOffer(label="5L", sku="HD1540-5", price="Call for pricing"),
            PackSizeOffer(label="20L", sku="HD1540-20"),
            PackSizeOffer(label="205L", sku="HD1540-205"),
        ],
        unavailable_pack_sizes=[],
    ),
    "adblue": Product(
        slug="adblue",
        title="AdBlue",
        summary="ISO 22241 diesel exhaust fluid.",
        main_image_url="/static/images/adblue.jpg",
        pack_sizes=[
            PackSizeOffer(label="10L", sku="ADB-10", notes="With spout"),
            PackSizeOffer(label="1000L", sku="ADB-IBC"),
        ],
        unavailable_pack_sizes=["1L", "25L", "200L", "205L", "208L"],
    ),
    "gear-oil-ep-320": Product(
        slug="gear-oil-ep-320",
        title="Industrial Gear Oil EP 320",
        summary="Extreme pressure gear oil for enclosed gearboxes.",
        viscosity_grade="ISO VG 320",
    ),
}


class ProductDatabase:
    """In-memory product content source"""

    def __init__(self, products: Optional[dict[str, Product]] = None):
        self.products = dict(products if products is not None else PRODUCTS)

    def get_product(self, slug: str) -> Optional[Product]:
        """Get a product by slug"""
        return self.products.get(slug)

    def get_all_products(self) -> list[Product]:
        """Get all products, sorted by title"""
        return sorted(self.products.values(), key=lambda p: p.title)


# Singleton instance
product_db = ProductDatabase()
