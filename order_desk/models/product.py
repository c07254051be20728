"""Product and pack size models for the order desk"""

from pydantic import AliasChoices, BaseModel, Field
from typing import Optional


class PackSizeOffer(BaseModel):
    """One purchasable pack size of a product"""
    label: str = Field(min_length=1)
    sku: Optional[str] = None
    price: Optional[str] = None
    lead_time: Optional[str] = Field(None, validation_alias=AliasChoices("lead_time", "leadTime"))
    moq: Optional[str] = None
    notes: Optional[str] = None
    image_url: Optional[str] = Field(None, validation_alias=AliasChoices("image_url", "imageUrl"))

    class Config:
        frozen = True

    @property
    def has_details(self) -> bool:
        """True when there is anything besides the label worth showing"""
        return any([self.sku, self.price, self.lead_time, self.moq])


class Product(BaseModel):
    """Product record as supplied by the content source"""
    slug: str
    title: str
    summary: Optional[str] = None
    viscosity_grade: Optional[str] = None
    approvals: list[str] = []
    main_image_url: Optional[str] = None
    pack_sizes: list[PackSizeOffer] = []
    unavailable_pack_sizes: list[str] = []


class ProductSummary(BaseModel):
    """Product list entry"""
    slug: str
    title: str
    summary: Optional[str] = None


class ProductDetailResponse(BaseModel):
    """Product with the pack sizes to display"""
    slug: str
    title: str
    summary: Optional[str] = None
    viscosity_grade: Optional[str] = None
    approvals: list[str] = []
    main_image_url: Optional[str] = None
    sizes: list[PackSizeOffer]
    size_hint: str
