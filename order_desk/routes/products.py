"""Product API routes for the order desk"""

from fastapi import APIRouter, HTTPException, Depends

from ..models.product import ProductDetailResponse, ProductSummary
from ..database.products import product_db, ProductDatabase
from ..services.size_catalog import resolve_sizes, size_hint

router = APIRouter(prefix="/api/products", tags=["Products"])


def get_product_db() -> ProductDatabase:
    """Content source dependency"""
    return product_db


@router.get("", response_model=list[ProductSummary])
async def list_products(db: ProductDatabase = Depends(get_product_db)):
    """List products"""
    return [
        ProductSummary(slug=p.slug, title=p.title, summary=p.summary)
        for p in db.get_all_products()
    ]


@router.get("/{slug}", response_model=ProductDetailResponse)
async def get_product(slug: str, db: ProductDatabase = Depends(get_product_db)):
    """
    Get a product with its resolved pack sizes.

    Standard sizes are always listed unless the product hides them.
    """
    product = db.get_product(slug)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")

    sizes = resolve_sizes(product.pack_sizes, product.unavailable_pack_sizes)
    return ProductDetailResponse(
        slug=product.slug,
        title=product.title,
        summary=product.summary,
        viscosity_grade=product.viscosity_grade,
        approvals=product.approvals,
        main_image_url=product.main_image_url,
        sizes=sizes,
        size_hint=size_hint(sizes),
    )
