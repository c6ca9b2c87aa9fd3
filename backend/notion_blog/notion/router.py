# backend/notion_blog/notion/router.py

"""
記事データ参照用の FastAPI ルーター定義。

- GET /posts
- GET /posts/{slug}
"""

from typing import Any, AsyncIterator, Dict

from fastapi import APIRouter, Depends, HTTPException, status

from .schemas import PostsResponse
from .service import NotionPostService

router = APIRouter(prefix="/posts", tags=["posts"])


async def get_post_service() -> AsyncIterator[NotionPostService]:
    """
    リクエストごとに NotionPostService を生成し、終了時に接続を閉じる。
    """
    async with NotionPostService() as service:
        yield service


@router.get(
    "",
    response_model=PostsResponse,
    summary="公開済み記事の一覧",
    description="Notion データベースから Status=Published の記事を取得し、フラット化して返す。",
)
async def list_posts(
    service: NotionPostService = Depends(get_post_service),
) -> PostsResponse:
    """
    記事一覧を返すエンドポイント。

    build_posts() は失敗時に空リストを返すため、ここでは 500 にならない。
    """
    result = await service.build_posts()
    posts = result["posts"]
    return PostsResponse(posts=posts, count=len(posts))


@router.get(
    "/{slug}",
    summary="スラッグで記事を 1 件取得",
)
async def get_post(
    slug: str,
    service: NotionPostService = Depends(get_post_service),
) -> Dict[str, Any]:
    """
    スラッグが一致する最初の記事を返す。見つからなければ 404。
    """
    result = await service.build_posts()
    for post in result["posts"]:
        if post.get("slug") == slug:
            return post

    raise HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Post not found: {slug}",
    )
