# backend/notion_blog/main.py

"""
記事データ API のエントリーポイント。

- /posts      公開済み記事の一覧
- /posts/{slug}
- /health
"""

from dotenv import load_dotenv
from fastapi import FastAPI

from notion_blog.notion.router import router as posts_router


def create_app() -> FastAPI:
    """
    FastAPI アプリケーションファクトリ。
    """
    load_dotenv()

    app = FastAPI(title="Notion Blog Data")

    app.include_router(posts_router)

    @app.get("/health", tags=["health"])
    def health_check() -> dict:
        """
        簡易ヘルスチェックエンドポイント。
        """
        return {"status": "ok"}

    return app


# uvicorn 実行時のエントリーポイント
app = create_app()
