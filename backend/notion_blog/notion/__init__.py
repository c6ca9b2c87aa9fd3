# backend/notion_blog/notion/__init__.py

"""
Notion 連携用モジュール群。

主な責務:
- データベース ID からデータソース ID を解決する
- 公開済み記事を取得し、プロパティをフラットな dict に変換する
- 本文ブロックを軽量マークアップに変換する
"""
