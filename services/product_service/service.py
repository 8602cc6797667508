import structlog
from sqlalchemy.ext.asyncio import AsyncSession
from .models import Product
from .repository import ProductRepository
from .schemas import ProductCreate, ProductUpdate

logger = structlog.get_logger(__name__)

class ProductService:

    @staticmethod
    async def create_product(db: AsyncSession, data: ProductCreate):
        product = Product(
            name=data.name,
            description=data.description,
            price_base=data.price_base,
            image_url=data.image_url,
            stock=data.stock,
            is_active=True,
        )
        return await ProductRepository.create_product(db, product)

    @staticmethod
    async def list_products(db: AsyncSession, include_inactive: bool = False):
        return await ProductRepository.get_all_products(db, include_inactive)

    @staticmethod
    async def get_product_by_id(db: AsyncSession, product_id: int, include_inactive: bool = False):
        product = await ProductRepository.get_product_by_id(db, product_id)
        if product is None or (not product.is_active and not include_inactive):
            return None
        return product

    @staticmethod
    async def update_product(db: AsyncSession, product_id: int, data: ProductUpdate):
        product = await ProductRepository.get_product_by_id(db, product_id)
        if not product:
            return None
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(product, field, value)
        return await ProductRepository.update_product(db, product)

    @staticmethod
    async def retire_product(db: AsyncSession, product_id: int):
        """Soft delete; historical order items still reference the row."""
        product = await ProductRepository.get_product_by_id(db, product_id)
        if not product:
            return None
        product.is_active = False
        logger.info("product_retired", product_id=product_id)
        return await ProductRepository.update_product(db, product)
