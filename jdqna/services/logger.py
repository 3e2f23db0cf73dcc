# jdqna/services/logger.py
# 카테고리별 logger 레지스트리.
# main.py 에서 1회 생성 후 app.state.loggers 에 붙이고, 라우터 핸들러에는 Depends(get_loggers)로 주입한다.
# 서비스 모듈은 logging.getLogger("jdqna.<모듈>") 을 직접 쓰며, 같은 "jdqna" 루트 핸들러를 공유한다.
import logging
import sys
from typing import Dict

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s"
ROOT_NAME = "jdqna"


class LoggerRegistry:
    def __init__(self, root: str = ROOT_NAME):
        self.root = root
        self._loggers: Dict[str, logging.Logger] = {}

    def configure(self, level: str = "INFO") -> logging.Logger:
        root_logger = logging.getLogger(self.root)
        root_logger.setLevel(level.upper())
        # 재호출 시 핸들러 중복 방지
        if not any(isinstance(h, logging.StreamHandler) for h in root_logger.handlers):
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(logging.Formatter(LOG_FORMAT))
            root_logger.addHandler(handler)
        return root_logger

    def get(self, category: str) -> logging.Logger:
        if category not in self._loggers:
            self._loggers[category] = logging.getLogger(f"{self.root}.{category}")
        return self._loggers[category]
