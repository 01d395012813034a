from fastapi import APIRouter

from .books import router as books_router
from .messages import router as messages_router

string_router = APIRouter(prefix="/v1")
string_router.include_router(messages_router)

book_router = APIRouter(prefix="/v1")
book_router.include_router(books_router)
