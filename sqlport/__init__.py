"""
sqlport
SQLダンプの解析、インポート、データベースとの構造比較を行うパッケージ

Modules
-------
- `schema_toolkit` : SQLダンプの解析、依存関係の解決、構造の比較
- `client` : データベースクライアント
- `importer` : インポートの実行計画と実行
- `config` : 設定ファイルの読み込み
- `errors` : エラー情報と例外
- `logger` : ログ出力
"""
