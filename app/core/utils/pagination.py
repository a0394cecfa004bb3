"""페이지네이션 유틸리티 (offset/limit)"""

from fastapi import Query

DEFAULT_LIMIT = 20
MAX_LIMIT = 100


class PageParams:
    """offset/limit 페이지네이션 파라미터 의존성

    Example::

        @router.get("", response_model=ListAPIResponse[ItemView])
        async def list_items(page_params: PageParams = Depends()):
            items, total = await service.list_items(
                filters, offset=page_params.offset, limit=page_params.limit
            )
            return create_list_response(
                data=items,
                total=total,
                offset=page_params.offset,
                limit=page_params.limit,
            )
    """

    def __init__(
        self,
        offset: int = Query(0, ge=0, description="건너뛸 항목 수"),
        limit: int = Query(
            DEFAULT_LIMIT, ge=1, le=MAX_LIMIT, description="조회할 최대 항목 수"
        ),
    ):
        self.offset = offset
        self.limit = limit
