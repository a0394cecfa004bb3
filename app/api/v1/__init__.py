"""API v1 라우터"""

from typing import Any

from fastapi import APIRouter

from app.core.schemas import APIResponse
from app.domains.comments import router as comments
from app.domains.items import router as items
from app.domains.users import router as users

API_VERSION = "1.0.0"

# (라우터, prefix, 태그)
ROUTES = (
    (users.router, "/users", "Users"),
    (users.user_router, "/user", "Users"),
    (users.profiles_router, "/profiles", "Profiles"),
    (items.router, "/items", "Items"),
    (comments.router, "/items/{slug}/comments", "Comments"),
    (items.tags_router, "/tags", "Tags"),
    (comments.admin_router, "/admin/comments", "Admin"),
)

api_router = APIRouter()
for domain_router, prefix, tag in ROUTES:
    api_router.include_router(domain_router, prefix=prefix, tags=[tag])


@api_router.get("/", response_model=APIResponse[dict[str, Any]])
async def api_v1_root():
    return APIResponse(
        message="Anythink Market API v1",
        data={"version": API_VERSION, "docs": "/docs"},
    )
