# Models module
from bookstore.models.book import Book
from bookstore.models.promotion import Promotion, PromotionType, promotion_books
from bookstore.models.rule import Rule, DEFAULT_RULES
from bookstore.models.sales import Invoice, InvoiceDetail, Order, OrderDetail

__all__ = [
    "Book",
    "Promotion",
    "PromotionType",
    "promotion_books",
    "Rule",
    "DEFAULT_RULES",
    "Invoice",
    "InvoiceDetail",
    "Order",
    "OrderDetail",
]
