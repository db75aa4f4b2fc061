"""Create the content table (if missing) and seed the home page row.

Usage: python scripts/bootstrap_content.py

Idempotent: an existing ``home`` row is left untouched.
"""
from __future__ import annotations

import os
import sys

from dotenv import load_dotenv

# Ensure project root on sys.path when running as standalone script
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from corpsite import create_app  # noqa: E402
from corpsite.content_repo import SiteContentRepo  # noqa: E402
from corpsite.db import create_all, get_session  # noqa: E402

HOME_ROW = {
    "title": "mrtc.kr",
    "subtitle": "환영합니다",
    "body": "이 텍스트는 관리자 페이지에서 수정할 수 있습니다.",
    "hero_image_url": "",
}


def main() -> int:
    load_dotenv()
    app = create_app()
    with app.app_context():
        create_all()
        db = get_session()
        try:
            repo = SiteContentRepo(db)
            if repo.get("home") is not None:
                print("home row already present; nothing to do")
                return 0
            repo.upsert("home", **HOME_ROW)
            print("seeded home row")
            return 0
        finally:
            db.close()


if __name__ == "__main__":
    raise SystemExit(main())
