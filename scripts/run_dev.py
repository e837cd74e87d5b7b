#!/usr/bin/env python
"""
개발 서버 실행 스크립트
.env를 로드한 뒤 FastAPI 서버를 auto-reload 모드로 실행
"""
import os
import sys
import logging

# 프로젝트 루트를 Python 경로에 추가
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, project_root)

# 로깅 설정
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def run_uvicorn():
    """Uvicorn 서버 실행"""
    import uvicorn
    from dotenv import load_dotenv

    # 환경 변수 로드
    load_dotenv()

    uvicorn.run(
        "app.main:app",
        host=os.getenv("API_HOST", "0.0.0.0"),
        port=int(os.getenv("API_PORT", "8000")),
        reload=True,
        log_level="debug",
    )


if __name__ == "__main__":
    try:
        run_uvicorn()
    except KeyboardInterrupt:
        logger.info("[Dev Server] 서버 종료 요청 수신")
