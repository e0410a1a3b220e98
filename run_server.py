#!/usr/bin/env python3
"""
お問い合わせフォーム サーバー起動スクリプト
開発環境用（設定は .env / 環境変数から）
"""

import uvicorn
import sys

from settings import get_settings


def main():
    """メイン関数"""
    settings = get_settings()
    print("🚀 Contact form server starting...")
    print(f"🌐 URL: http://{settings.host}:{settings.port}/")
    print(f"📝 Submission log: {settings.log_path}")
    print("-" * 50)

    try:
        uvicorn.run(
            "main:app",
            host=settings.host,
            port=settings.port,
            reload=settings.reload,
            log_level="info",
            access_log=True
        )
    except KeyboardInterrupt:
        print("\n🛑 Server stopped")
    except Exception as e:
        print(f"❌ Server failed to start: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
